"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from docpages.config import (
    BuildConfig,
    CollectionConfig,
    Config,
    ContentConfig,
    ContentSource,
    LiveReloadConfig,
    RemoteConfig,
    ServerConfig,
    SiteConfig,
)

OVERVIEW_MDX = """\
---
page_title: Install
sidebar_title: Overview
description: Installing Consul
---

# Hello

@include 'note.mdx'
"""

DOCS_NAVIGATION = [
    "index",
    {"category": "install", "content": ["overview"]},
    "-----",
    {"title": "Learn", "href": "https://learn.hashicorp.com/consul"},
]


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a project tree with two collections, a partial and navigation files.

    content/docs/index.mdx
    content/docs/install/overview.mdx   (includes partials/note.mdx)
    content/intro/index.mdx
    """
    docs = tmp_path / "content" / "docs"
    (docs / "install").mkdir(parents=True)
    (docs / "index.mdx").write_text("---\npage_title: Documentation\n---\n\n# Documentation\n")
    (docs / "install" / "overview.mdx").write_text(OVERVIEW_MDX)

    intro = tmp_path / "content" / "intro"
    intro.mkdir(parents=True)
    (intro / "index.mdx").write_text("---\npage_title: Introduction\n---\n\nWhat is Consul?\n")

    partials = tmp_path / "partials"
    partials.mkdir()
    (partials / "note.mdx").write_text("-> Restart the agents.\n")

    data = tmp_path / "data"
    data.mkdir()
    (data / "docs-navigation.json").write_text(json.dumps(DOCS_NAVIGATION))
    (data / "intro-navigation.json").write_text(json.dumps(["index"]))

    return tmp_path


@pytest.fixture
def test_config(project_dir: Path) -> Config:
    """Create a test configuration over project_dir.

    Every collection is local, so no test touches the network unless it
    configures a remote collection itself.
    """
    return Config(
        site=SiteConfig(),
        content=ContentConfig(root_dir=project_dir),
        remote=RemoteConfig(base_url="http://127.0.0.1:9/pages"),
        build=BuildConfig(output_dir=project_dir / "out", concurrency=2),
        server=ServerConfig(),
        live_reload=LiveReloadConfig(enabled=False),
        collections={
            "docs": CollectionConfig(
                name="docs",
                content_dir="docs",
                url_prefix="docs",
                category="docs",
                source=ContentSource.LOCAL,
                navigation=project_dir / "data" / "docs-navigation.json",
            ),
            "intro": CollectionConfig(
                name="intro",
                content_dir="intro",
                url_prefix="intro",
                category="intro",
                source=ContentSource.LOCAL,
                navigation=project_dir / "data" / "intro-navigation.json",
            ),
        },
    )
