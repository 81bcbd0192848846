import py.path

ROOT = py.path.local(__file__).dirpath()

__version__ = "0.1.0"
