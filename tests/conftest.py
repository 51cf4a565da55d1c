"""Shared fixtures for treecmp tests."""

import os
from collections import defaultdict

import pytest
from click.testing import CliRunner
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo

from treecmp.cli import main
from treecmp.repo import GitRepository

MODE_FILE = 0o100644
MODE_EXEC = 0o100755
MODE_LINK = 0o120000
MODE_GITLINK = 0o160000

CRLF_ATTRIBUTES = b"*.txt text eol=crlf\n"


@pytest.fixture(autouse=True)
def _isolated_git_config(monkeypatch, tmp_path):
    """Keep the user's global git config (autocrlf, filters) out of the tests."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("TREECMP_REPO", raising=False)


class RepoBuilder:
    """Writes trees, commits and tags straight into a bare repo with dulwich.

    File values are ``bytes`` (regular file) or ``(data, mode)``; for a
    submodule pass ``(commit_hex_bytes, MODE_GITLINK)``.  Path strings are
    encoded with surrogateescape, so names that are not UTF-8 can be written.
    """

    def __init__(self, path):
        self.path = str(path)
        self.repo = Repo.init_bare(self.path, mkdir=True)
        self.repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")
        self._time = 1_700_000_000

    def _add(self, obj):
        self.repo.object_store.add_object(obj)
        return obj.id

    def blob(self, data: bytes) -> str:
        return self._add(Blob.from_string(data)).decode()

    def tree(self, files: dict) -> str:
        return self._write_tree(files).decode()

    def _write_tree(self, files: dict) -> bytes:
        tree = Tree()
        subdirs = defaultdict(dict)
        for path, value in files.items():
            head, sep, rest = path.partition("/")
            if sep:
                subdirs[head][rest] = value
                continue
            data, mode = value if isinstance(value, tuple) else (value, MODE_FILE)
            sha = data if mode == MODE_GITLINK else self._add(Blob.from_string(data))
            tree.add(head.encode("utf-8", "surrogateescape"), mode, sha)
        for name, sub in subdirs.items():
            tree.add(name.encode(), 0o040000, self._write_tree(sub))
        return self._add(tree)

    def commit(self, files: dict, message: str = "commit", branch: str = "main", parents=None) -> str:
        ref = f"refs/heads/{branch}".encode()
        if parents is None:
            parents = [self.repo.refs[ref]] if ref in self.repo.refs else []
        else:
            parents = [p.encode() if isinstance(p, str) else p for p in parents]
        c = Commit()
        c.tree = self._write_tree(files)
        c.parents = parents
        c.author = c.committer = b"Test <test@example.com>"
        c.author_time = c.commit_time = self._time
        self._time += 60
        c.author_timezone = c.commit_timezone = 0
        c.encoding = b"UTF-8"
        c.message = message.encode() + (b"\n" if message else b"")
        self._add(c)
        self.repo.refs[ref] = c.id
        return c.id.decode()

    def tag(self, name: str, target: str, message: str = "tag", target_type=Commit) -> str:
        t = Tag()
        t.name = name.encode()
        t.object = (target_type, target.encode())
        t.tagger = b"Test <test@example.com>"
        t.tag_time = self._time
        t.tag_timezone = 0
        t.message = message.encode() + b"\n"
        self._add(t)
        self.repo.refs[f"refs/tags/{name}".encode()] = t.id
        return t.id.decode()

    def configure(self, section: bytes, name: bytes, value: bytes) -> None:
        """Set one key in the repository's own config file."""
        config = self.repo.get_config()
        config.set((section,), name, value)
        config.write_to_path()

    def corrupt(self, sha: str) -> None:
        """Overwrite the loose object *sha* with bytes that do not inflate."""
        path = os.path.join(self.path, "objects", sha[:2], sha[2:])
        os.chmod(path, 0o644)
        with open(path, "wb") as f:
            f.write(b"not a zlib stream")

    def open(self) -> GitRepository:
        return GitRepository.open(self.path)


@pytest.fixture
def builder(tmp_path):
    return RepoBuilder(tmp_path / "repo.git")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def diverged(builder):
    """Two branches with unrelated histories that end at the same files.

    main:    "start" -> "add b"      (a.txt, b.txt)
    develop: "squashed"              (a.txt, b.txt)
    feature: main + newfile.txt
    """
    builder.commit({"a.txt": b"alpha\n"}, "start")
    builder.commit({"a.txt": b"alpha\n", "b.txt": b"beta\n"}, "add b")
    builder.commit({"a.txt": b"alpha\n", "b.txt": b"beta\n"}, "squashed", branch="develop", parents=[])
    builder.commit(
        {"a.txt": b"alpha\n", "b.txt": b"beta\n", "newfile.txt": b"new\n"},
        "add newfile", branch="feature", parents=[builder.repo.refs[b"refs/heads/main"]],
    )
    return builder


@pytest.fixture
def crlf_pair(builder):
    """Two branches whose trees differ only in a file normalized on checkout.

    ``lf`` stores LF line endings, ``crlf`` stores CRLF; with
    ``eol=crlf`` both check out as CRLF.
    """
    builder.commit({".gitattributes": CRLF_ATTRIBUTES, "a.txt": b"l1\nl2\n"}, "lf", branch="lf", parents=[])
    builder.commit({".gitattributes": CRLF_ATTRIBUTES, "a.txt": b"l1\r\nl2\r\n"}, "crlf", branch="crlf", parents=[])
    return builder


@pytest.fixture
def compare_cli(runner):
    """Return a function running ``treecmp compare`` against a repo path."""
    def _invoke(repo_path, *args):
        return runner.invoke(main, ["compare", "--repo", repo_path, *args])
    return _invoke
