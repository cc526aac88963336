"""Project scaffolding for `egg new`."""

from __future__ import annotations

from pathlib import Path

_EGG_TOML_TEMPLATE = """\
[package]
name = "{name}"
version = "0.1.0"

[analysis]
warnings_as_errors = false

[unparse]
indent = 4
annotate = true
"""

_MAIN_EGG_TEMPLATE = """\
struct Point {
    int x;
    int y;
};

int square(int n) {
    return n * n;
}

void main() {
    struct Point p;
    p.x = 3;
    p.y = square(p.x);
    cout << p.y;
}
"""

_GITIGNORE = """\
__pycache__/
*.out
"""

_README_TEMPLATE = """\
# {name}

An egg project.

## Check

```bash
egg check
```

## Show resolved names

```bash
egg unparse src/main.egg
```
"""


def scaffold(name: str, parent: Path | None = None) -> Path:
    """Create a new egg project directory. Returns the project path."""
    base = parent or Path.cwd()
    project_dir = base / name

    if project_dir.exists():
        raise FileExistsError(f"Directory '{name}' already exists")

    src_dir = project_dir / "src"
    src_dir.mkdir(parents=True)

    (project_dir / "egg.toml").write_text(_EGG_TOML_TEMPLATE.format(name=name))
    (src_dir / "main.egg").write_text(_MAIN_EGG_TEMPLATE)
    (project_dir / ".gitignore").write_text(_GITIGNORE)
    (project_dir / "README.md").write_text(_README_TEMPLATE.format(name=name))

    return project_dir
