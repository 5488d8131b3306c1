"""GitHub 客户端测试（urlopen 打桩，不访问网络）"""

from __future__ import annotations

import io
import json
import logging
import urllib.error
import urllib.request
from pathlib import Path

import pytest

from depot.core.models import Dist, Project
from depot.services.hub import GitHubClient, RemoteRepo, fork_target

REPO_JSON = {
    "name": "bump",
    "owner": {"login": "disruptek"},
    "clone_url": "https://github.com/disruptek/bump.git",
    "html_url": "https://github.com/disruptek/bump",
    "description": "a tiny tool to bump nimble versions",
    "stargazers_count": 42,
    "fork": False,
}


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture()
def calls(monkeypatch):
    """记录请求并按队列返回响应；队列元素为 dict 或异常"""
    sent: list[urllib.request.Request] = []
    replies: list = []

    def fake_urlopen(req, timeout=None):
        sent.append(req)
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return FakeResponse(json.dumps(reply).encode("utf-8"))

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    return sent, replies


class TestSearch:
    def test_results_parsed(self, calls) -> None:
        sent, replies = calls
        replies.append({"total_count": 1, "items": [REPO_JSON]})
        repos = GitHubClient().search("bump nim", limit=5)
        assert len(repos) == 1
        repo = repos[0]
        assert str(repo) == "disruptek/bump"
        assert repo.git == "https://github.com/disruptek/bump.git"
        assert repo.stars == 42
        url = sent[0].full_url
        assert url.startswith("https://api.github.com/search/repositories?")
        assert "q=bump+nim" in url and "per_page=5" in url and "sort=stars" in url

    def test_blank_query(self, calls) -> None:
        sent, _replies = calls
        assert GitHubClient().search("   ") == []
        assert sent == []

    def test_http_error_yields_empty(self, calls, caplog) -> None:
        _sent, replies = calls
        replies.append(urllib.error.HTTPError("u", 403, "rate limited", {}, None))
        with caplog.at_level(logging.ERROR, logger="depot"):
            assert GitHubClient().search("bump") == []
        assert any("403" in r.getMessage() for r in caplog.records)

    def test_network_error_yields_empty(self, calls) -> None:
        _sent, replies = calls
        replies.append(urllib.error.URLError("no route"))
        assert GitHubClient().search("bump") == []

    def test_non_http_api_rejected(self, calls, caplog) -> None:
        sent, _replies = calls
        with caplog.at_level(logging.ERROR, logger="depot"):
            assert GitHubClient(api="file:///etc").search("bump") == []
        assert sent == []

    def test_token_sent(self, calls, monkeypatch) -> None:
        sent, replies = calls
        monkeypatch.setenv("DEPOT_TEST_TOKEN", "s3cret")
        replies.append({"items": []})
        GitHubClient(token_env="DEPOT_TEST_TOKEN").search("x")
        assert sent[0].get_header("Authorization") == "Bearer s3cret"


class TestFork:
    def test_requires_token(self, calls, monkeypatch, caplog) -> None:
        sent, _replies = calls
        monkeypatch.delenv("DEPOT_TEST_TOKEN", raising=False)
        with caplog.at_level(logging.ERROR, logger="depot"):
            assert GitHubClient(token_env="DEPOT_TEST_TOKEN").fork("disruptek", "bump") is None
        assert sent == []
        assert any("DEPOT_TEST_TOKEN" in r.getMessage() for r in caplog.records)

    def test_success(self, calls, monkeypatch) -> None:
        sent, replies = calls
        monkeypatch.setenv("DEPOT_TEST_TOKEN", "s3cret")
        replies.append({**REPO_JSON, "owner": {"login": "me"}, "fork": True,
                        "clone_url": "https://github.com/me/bump.git"})
        forked = GitHubClient(token_env="DEPOT_TEST_TOKEN").fork("disruptek", "bump")
        assert isinstance(forked, RemoteRepo)
        assert forked.owner == "me" and forked.fork
        assert sent[0].get_method() == "POST"
        assert sent[0].full_url == "https://api.github.com/repos/disruptek/bump/forks"


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/disruptek/bump", ("disruptek", "bump")),
    ("git@github.com:disruptek/bump.git", ("disruptek", "bump")),
    ("https://gitlab.com/disruptek/bump", None),
    ("", None),
])
def test_fork_target(url: str, expected) -> None:
    project = Project(name="bump", path=Path("/deps/bump"), dist=Dist.GIT, url=url)
    assert fork_target(project) == expected
