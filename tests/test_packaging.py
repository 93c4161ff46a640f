import os
import subprocess
import sys
import tempfile
import tomllib
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]


def test_pyproject_declares_editable_package_and_scripts():
    pyproject_path = REPO_ROOT / "pyproject.toml"
    data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))

    assert data["project"]["name"] == "sokoclone"
    assert "pygame>=2.0.0" in data["project"]["dependencies"]
    assert "pydantic>=2" in data["project"]["dependencies"]
    assert any(dep.startswith("pytest") for dep in data["project"]["optional-dependencies"]["test"])
    scripts = data["project"]["scripts"]
    assert scripts["sokoclone-editor"] == "src.editor.level_editor:main"


def test_src_imports_resolve_outside_repo_via_editable_install():
    env = os.environ.copy()
    env.pop("PYTHONPATH", None)

    with tempfile.TemporaryDirectory() as tmpdir:
        result = subprocess.run(
            [sys.executable, "-c", "import src.core.config"],
            cwd=tmpdir,
            env=env,
            capture_output=True,
            text=True,
        )

    assert result.returncode == 0, (
        "Importing 'src' from outside the repository failed. "
        "Ensure editable install is active (`pip install -e .`).\n"
        f"stdout:\n{result.stdout}\n"
        f"stderr:\n{result.stderr}"
    )
