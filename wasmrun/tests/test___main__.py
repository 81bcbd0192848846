import os
import subprocess
import sys
from typing import Any
import pytest
import wasmrun
from wasmrun.tests.support import MATH_WAT, write_wasm


@pytest.mark.usefixtures('init')
class TestMain:
    tmpdir: Any

    @pytest.fixture
    def init(self, tmpdir):
        self.tmpdir = tmpdir
        write_wasm(tmpdir, 'math', MATH_WAT)

    def run(self, *args: Any) -> subprocess.CompletedProcess:
        env = dict(os.environ)
        env.pop('WASMRUN_DIR', None)
        env['PYTHONPATH'] = str(wasmrun.ROOT.dirpath())
        cmd = [sys.executable, '-m', 'wasmrun'] + [str(arg) for arg in args]
        print(f'run: {" ".join(cmd)}')
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(self.tmpdir),
            env=env,
        )

    def test_add(self):
        proc = self.run('math', 'add', '2', '4')
        assert proc.returncode == 0
        assert proc.stdout == '6\n'

    def test_usage(self):
        proc = self.run('math')
        assert proc.returncode == 1
        assert proc.stdout == ''
        assert 'Usage' in proc.stderr

    def test_missing_module(self):
        proc = self.run('nope', 'add', '1', '2')
        assert proc.returncode == 1
        assert proc.stdout == ''
        assert 'ModuleLoadError' in proc.stderr
