"""
Pytest configuration and shared fixtures.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent

SAMPLE_CONFIG = r'''<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <!-- managed by the build team -->
  <packageSources>
    <clear />
    <add key="nuget" value="https://api.nuget.org/v3/index.json" protocolVersion="3" />
    <!-- note -->
    <!--<add key="local" value="C:\nuget" />-->
    <add key="Company" value="https://nuget.example.com/v3/index.json" />
  </packageSources>
  <config>
    <add key="globalPackagesFolder" value="packages" />
  </config>
</configuration>
'''


@pytest.fixture
def tmp_app_dirs(tmp_path, monkeypatch):
    """Point the settings and data directories at a temporary location."""
    config_dir = tmp_path / "ncc_config"
    data_dir = tmp_path / "ncc_data"
    monkeypatch.setenv('NCC_CONFIG_DIR', str(config_dir))
    monkeypatch.setenv('NCC_DATA_DIR', str(data_dir))
    return config_dir, data_dir


@pytest.fixture
def settings_file(tmp_app_dirs):
    """Path of the settings file inside the temporary config directory."""
    config_dir, _ = tmp_app_dirs
    return config_dir / "appsettings.json"


@pytest.fixture
def app_config(tmp_app_dirs, settings_file):
    """Provide a Config instance backed by temporary files."""
    from nuget_config_creator.config import Config

    _, data_dir = tmp_app_dirs
    return Config(str(settings_file), backup_dir=str(data_dir / "backups"))


@pytest.fixture
def nuget_config_path(tmp_path):
    """Path for a NuGet.config that does not exist yet."""
    return tmp_path / "NuGet.config"


@pytest.fixture
def sample_config(nuget_config_path):
    """Write a representative NuGet.config and return its path."""
    nuget_config_path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return nuget_config_path


@pytest.fixture
def cli_runner(tmp_app_dirs, tmp_path):
    """Wrapper for running the CLI in a subprocess."""
    config_dir, data_dir = tmp_app_dirs

    def run_cli(*args, **kwargs):
        """Run CLI command with proper environment setup."""
        env = os.environ.copy()
        env['NCC_CONFIG_DIR'] = str(config_dir)
        env['NCC_DATA_DIR'] = str(data_dir)
        env['PYTHONPATH'] = os.pathsep.join(
            p for p in [str(REPO_ROOT), env.get('PYTHONPATH', '')] if p
        )

        cmd = [sys.executable, '-m', 'nuget_config_creator.cli.main'] + list(args)

        kwargs.setdefault('capture_output', True)
        kwargs.setdefault('text', True)
        kwargs.setdefault('env', env)
        kwargs.setdefault('cwd', str(tmp_path))

        return subprocess.run(cmd, **kwargs)

    return run_cli


@pytest.fixture
def sample_config_text():
    """Text of the document written by ``sample_config``."""
    return SAMPLE_CONFIG
