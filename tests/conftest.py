"""Shared fixtures: a small content tree in the layout folio builds from."""

from pathlib import Path

import pytest

from folio.config import SiteConfig
from folio.site.assembler import BuildContext

PUB_2020 = """---
title: "Closed-loop optimisation of a C–N coupling"
collection: publications
permalink: /publication/2020-05-04-closed-loop-coupling
excerpt: 'Bayesian optimisation finds better conditions in fewer experiments.'
date: 2020-05-04
venue: 'Nature'
paperurl: 'https://example.org/paper2020.pdf'
citation: 'Doe, J. (2020). Closed-loop optimisation. Nature 1(1).'
tags:
  - bayesian optimization
  - catalysis
---
We report a closed-loop workflow.
"""

PUB_2017 = """---
title: "Photoredox decarboxylation"
collection: publications
permalink: /publication/2017-05-04-photoredox
date: 2017-05-04
venue: 'JACS'
---
An older paper.
"""

POST = """---
title: "Getting started with the optimizer"
permalink: /posts/2021/01/getting-started/
date: 2021-01-15
tags: [tutorial, bayesian optimization]
---
Install it and run:

```python
opt.run(budget=10)
```
"""


def write(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("FOLIO_CONTENT_DIR", "FOLIO_OUTPUT_DIR", "FOLIO_STRICT", "FOLIO_BASE_URL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Two publications, one post and a stylesheet."""
    root = tmp_path / "content"
    write(root, "_publications/2020-05-04-closed-loop-coupling.md", PUB_2020)
    write(root, "_publications/2017-05-04-photoredox.md", PUB_2017)
    write(root, "_posts/2021-01-15-getting-started.md", POST)
    write(root, "assets/css/main.css", "body { color: #333; }\n")
    return root


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    return tmp_path / "site"


def make_context(content_root: Path, output_root: Path, **build: object) -> BuildContext:
    config = SiteConfig.model_validate(
        {
            "site": {"title": "Test Lab", "author": "J. Doe"},
            "build": {
                "content_dir": str(content_root),
                "output_dir": str(output_root),
                **build,
            },
        }
    )
    return BuildContext.from_config(config)


@pytest.fixture
def context(content_root: Path, output_root: Path) -> BuildContext:
    return make_context(content_root, output_root)
