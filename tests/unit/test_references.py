from __future__ import absolute_import

import pytest
from mock import Mock

from deployregression import errors
from deployregression.references import Reference, ReferenceResolver, parse_reference

from .conftest import api_deployment


@pytest.mark.parametrize(
    "value,hostname,path",
    [
        ("app-1.example.app", "app-1.example.app", None),
        ("https://app-1.example.app", "app-1.example.app", None),
        ("https://app-1.example.app/", "app-1.example.app", None),
        ("app-1.example.app/docs", "app-1.example.app", "/docs"),
        ("https://app-1.example.app/a/b?c=1", "app-1.example.app", "/a/b?c=1"),
        ("APP-1.Example.app", "app-1.example.app", None),
    ],
)
def test_parse_reference(value, hostname, path):
    assert parse_reference(value) == (hostname, path)


@pytest.mark.parametrize("value", ["/docs", "https:///path"])
def test_parse_reference_invalid(value):
    with pytest.raises(errors.InvalidReference) as ctx:
        parse_reference(value, "bad")
    assert "no hostname provided" in str(ctx.value)
    assert "bad" in str(ctx.value)


class FakeClient(object):
    """resolve hostnames from a dict of json deployments"""

    def __init__(self, deployments):
        self.data = dict((d["url"], d) for d in deployments)
        self.deployment = Mock(side_effect=self.data.get)
        self.deployments = Mock(side_effect=AssertionError("no history fetch"))


@pytest.fixture
def client():
    return FakeClient(
        [
            api_deployment(1),
            api_deployment(5),
            api_deployment(7, project_id="prj_2"),
        ]
    )


def test_resolve(client):
    ref = ReferenceResolver(client).resolve("https://app-5.example.app/docs")
    assert isinstance(ref, Reference)
    assert ref.hostname == "app-5.example.app"
    assert ref.path == "/docs"
    assert ref.deployment.uid == "dpl_5"
    assert ref.created == ref.deployment.created
    assert ref.project_id == "prj_1"
    assert ref.owner_id == "team_1"
    client.deployment.assert_called_once_with("app-5.example.app")


def test_resolve_is_idempotent(client):
    resolver = ReferenceResolver(client)
    assert resolver.resolve("app-5.example.app") == resolver.resolve("app-5.example.app")


def test_resolve_not_found(client):
    with pytest.raises(errors.ReferenceResolutionFailed) as ctx:
        ReferenceResolver(client).resolve("unknown.example.app", "good")
    assert "good" in str(ctx.value)
    assert "unknown.example.app" in str(ctx.value)


def test_resolve_range(client):
    good, bad, path = ReferenceResolver(client).resolve_range(
        "app-1.example.app", "app-5.example.app"
    )
    assert good.deployment.uid == "dpl_1"
    assert bad.deployment.uid == "dpl_5"
    assert path is None


def test_resolve_range_optional_references(client):
    good, bad, path = ReferenceResolver(client).resolve_range(None, "app-5.example.app/x")
    assert good is None
    assert bad.deployment.uid == "dpl_5"
    assert path == "/x"

    assert ReferenceResolver(client).resolve_range(None, None) == (None, None, None)


def test_resolve_range_ordering_violation(client):
    with pytest.raises(errors.OrderingViolation):
        ReferenceResolver(client).resolve_range("app-5.example.app", "app-1.example.app")
    # no history fetch happened
    assert not client.deployments.called


def test_resolve_range_same_deployment(client):
    good, bad, _ = ReferenceResolver(client).resolve_range(
        "app-5.example.app", "app-5.example.app"
    )
    assert good.deployment == bad.deployment


def test_resolve_range_cross_project(client):
    with pytest.raises(errors.CrossProjectMismatch):
        ReferenceResolver(client).resolve_range("app-1.example.app", "app-7.example.app")


def test_resolve_range_invalid_reference_before_lookup(client):
    with pytest.raises(errors.InvalidReference):
        ReferenceResolver(client).resolve_range("/nohost", "app-5.example.app")
    assert not client.deployment.called


def test_resolve_range_resolution_error(client):
    with pytest.raises(errors.ReferenceResolutionFailed) as ctx:
        ReferenceResolver(client).resolve_range("app-1.example.app", "nope.example.app")
    assert "bad" in str(ctx.value)


@pytest.mark.parametrize(
    "good,bad,path,expected,note",
    [
        # explicit path wins
        ("app-1.example.app/a", "app-5.example.app/b", "/c", "/c", "Ignoring subpath /b"),
        # bad path wins over good path
        ("app-1.example.app/a", "app-5.example.app/b", None, "/b", "Ignoring subpath /a"),
        # same paths, no note
        ("app-1.example.app/a", "app-5.example.app/a", None, "/a", None),
        # only good has a path
        ("app-1.example.app/a", "app-5.example.app", None, "/a", None),
        # path given and equal
        ("app-1.example.app", "app-5.example.app/b", "/b", "/b", None),
    ],
)
def test_resolve_range_paths(mocker, client, good, bad, path, expected, note):
    log = mocker.patch("deployregression.references.LOG")
    _, _, result = ReferenceResolver(client).resolve_range(good, bad, path=path)
    assert result == expected
    messages = [c[0][0] for c in log.info.call_args_list]
    if note:
        assert any(note in m for m in messages)
    else:
        assert messages == []
