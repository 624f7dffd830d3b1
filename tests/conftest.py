from pathlib import Path

import pytest

from tests.infrastructure.file_utils import write_project


@pytest.fixture
def tmpproj(tmp_path: Path) -> Path:
    """
    Small mixed project:
      src/       two files with console calls, one without
      node_modules/ and dist/  excluded by default
      generated/ listed in .gitignore
    """
    return write_project(tmp_path, {
        "src/app.js": "import x from './x';\nconsole.log(x);\nrun(x);\n",
        "src/util.ts": "export function f(a: number) {\n  console.debug(a);\n  return a * 2;\n}\n",
        "src/clean.jsx": "export const App = () => <div>hi</div>;\n",
        "src/notes.md": "console.log('not code');\n",
        "node_modules/lib/index.js": "console.log('vendor');\n",
        "dist/bundle.js": "console.log('built');\n",
        "generated/out.js": "console.log('generated');\n",
        ".gitignore": "generated/\n",
    })
