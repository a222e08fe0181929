"""Pytest fixtures for dependency wheel tests."""

import pytest


def _node(path: str, chunk=None, **extra) -> dict:
    return {
        "identifier": path,
        "full_path": path,
        "stem": path.rsplit("/", 1)[-1],
        "chunk": chunk,
        "incoming": [],
        "outgoing": [],
        **extra,
    }


def build_snapshot(
    paths: list[str],
    edges: list[tuple[int, int]],
    chunks: dict[int, int | None] | None = None,
) -> dict:
    """Build an analyzer snapshot from paths and (source, target) index pairs."""
    chunks = chunks or {}
    nodes = [_node(path, chunks.get(i)) for i, path in enumerate(paths)]
    for source, target in edges:
        nodes[source]["outgoing"].append(target)
        nodes[target]["incoming"].append(source)
    return {
        "all_nodes": nodes,
        "analysis_groups": [],
        "entrypoint": dict(nodes[0]) if nodes else None,
        "node_map": {path: i for i, path in enumerate(paths)},
    }


@pytest.fixture
def make_snapshot():
    """Factory for snapshots: make_snapshot(paths, edges, chunks=None)."""
    return build_snapshot


@pytest.fixture
def chain_snapshot() -> dict:
    """A -> B, B -> C, B -> D, no chunks."""
    return build_snapshot(
        ["/proj/A.js", "/proj/B.js", "/proj/C.js", "/proj/D.js"],
        [(0, 1), (1, 2), (1, 3)],
    )


@pytest.fixture
def cycle_snapshot() -> dict:
    """Two-cycle: A -> B -> A."""
    return build_snapshot(["/proj/A.js", "/proj/B.js"], [(0, 1), (1, 0)])


@pytest.fixture
def chunked_snapshot() -> dict:
    """Five nodes spread over chunks 1, 0 and the unbundled bucket."""
    snapshot = build_snapshot(
        ["/proj/e.js", "/proj/b.js", "/proj/a.js", "/proj/d.js", "/proj/c.js"],
        [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0)],
        chunks={0: 1, 1: 0, 2: 1, 3: -1, 4: None},
    )
    snapshot["chunks"] = {
        "0": {"id": 0, "name": "main", "initial": True, "parents": [], "siblings": [], "children": [1]},
        "1": {"id": 1, "name": "", "initial": False, "parents": [0], "siblings": [], "children": []},
    }
    return snapshot


@pytest.fixture
def tree_snapshot() -> dict:
    """Snapshot with a folder group and a navigation tree.

    /proj/src/index.js -> /proj/src/lib/a.js -> /proj/src/lib/b.js
    /proj/src/lib is an analysis group including a.js and b.js.
    """
    snapshot = build_snapshot(
        ["/proj/src/index.js", "/proj/src/lib/a.js", "/proj/src/lib/b.js"],
        [(0, 1), (1, 2)],
    )
    snapshot["analysis_groups"] = [
        _node("/proj/src", depth=2, inclusions=[0, 1, 2], immediate_children=[0]),
        _node("/proj/src/lib", depth=3, inclusions=[1, 2], immediate_children=[1, 2]),
        _node("/proj", depth=1, inclusions=[0, 1, 2], immediate_children=[]),
    ]
    snapshot["file_tree"] = {
        "root_path": "/proj",
        "file_node": {
            "path": "proj",
            "full_path": "/proj",
            "is_folder": True,
            "children": [
                {
                    "path": "src",
                    "full_path": "/proj/src",
                    "is_folder": True,
                    "children": [
                        {
                            "path": "index.js",
                            "full_path": "/proj/src/index.js",
                            "valid_entrypoint": True,
                        },
                        {
                            "path": "lib",
                            "full_path": "/proj/src/lib",
                            "is_folder": True,
                            "children": [
                                {"path": "a.js", "full_path": "/proj/src/lib/a.js"},
                                {"path": "b.js", "full_path": "/proj/src/lib/b.js"},
                            ],
                        },
                    ],
                },
                {"path": "README.md", "full_path": "/proj/README.md"},
            ],
        },
    }
    return snapshot
