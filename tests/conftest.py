from pathlib import Path

import pytest


def _write_files(root: Path, files: dict[str, str]) -> None:
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def write_files():
    """Создаёт файлы по словарю {относительный путь: содержимое}"""
    return _write_files


@pytest.fixture
def sample_repo(tmp_path):
    """
    Небольшой репозиторий:

        .gitignore          dist/ and *.log
        .env
        .git/config
        node_modules/pkg/index.js
        dist/out.js
        debug.log
        README.md
        b.txt
        src/app.js
        src/lib/util.js
        src/lib/deep/x.js
    """
    _write_files(
        tmp_path,
        {
            ".gitignore": "# build output\ndist/\n*.log\n",
            ".env": "SECRET=1\n",
            ".git/config": "[core]\n",
            "node_modules/pkg/index.js": "// TODO\n",
            "dist/out.js": "// TODO\n",
            "debug.log": "TODO\n",
            "README.md": "# Readme\n",
            "b.txt": "bee\n",
            "src/app.js": "// TODO: fix\n",
            "src/lib/util.js": "export {}\n",
            "src/lib/deep/x.js": "x\n",
        },
    )
    return tmp_path
