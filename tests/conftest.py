"""
Shared fixtures: raw ingestion records as served by the backing store.
"""

import copy

import pytest

GITHUB_PUSH = {
    "ref": "refs/heads/master",
    "after": "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
    "repository": {"full_name": "octo/hello-world", "name": "hello-world"},
    "commits": [
        {
            "id": "0000000000000000000000000000000000000001",
            "message": "First commit",
            "timestamp": "2024-03-01T10:00:00Z",
        },
        {
            "id": "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
            "message": "Fix flaky test",
            "timestamp": "2024-03-01T10:05:00Z",
        },
    ],
    "head_commit": {
        "id": "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
        "message": "Fix flaky test",
        "timestamp": "2024-03-01T10:05:00Z",
        "author": {"name": "Octo Cat", "username": "octocat"},
        "committer": {"name": "Octo Cat", "username": "octocat"},
    },
    "sender": {
        "login": "octocat",
        "avatar_url": "https://avatars.example.com/octocat.png",
    },
}

GITHUB_PULL_REQUEST = {
    "action": "opened",
    "number": 42,
    "pull_request": {
        "title": "Add retry to uploader",
        "updated_at": "2024-03-02T12:00:00Z",
        "head": {"sha": "feedfacefeedfacefeedfacefeedfacefeedface"},
    },
    "repository": {"full_name": "octo/hello-world"},
    "sender": {
        "login": "hubot",
        "avatar_url": "https://avatars.example.com/hubot.png",
    },
}

GITHUB_COMMIT = {
    "sha": "c0ffeec0ffeec0ffeec0ffeec0ffeec0ffeec0ff",
    "commit": {
        "message": "Bump version",
        "author": {"name": "Mona", "date": "2024-03-03T08:00:00Z"},
        "committer": {"name": "Mona Lisa", "date": "2024-03-03T08:00:00Z"},
    },
    "author": {"avatar_url": "https://avatars.example.com/author.png"},
    "committer": {"avatar_url": "https://avatars.example.com/committer.png"},
    "repository": {"full_name": "octo/hello-world"},
}

BITBUCKET_PUSH = {
    "actor": {
        "display_name": "Jane Doe",
        "links": {"avatar": {"href": "https://bitbucket.example.com/jane.png"}},
    },
    "repository": {"full_name": "team/service"},
    "push": {
        "changes": [
            {
                "commits": [
                    {
                        "hash": "b1tb0cketb1tb0cketb1tb0cketb1tb0cket0000",
                        "message": "Update README\n\nMore details",
                        "date": "2024-03-04T09:30:00+00:00",
                        "author": {
                            "user": {
                                "links": {
                                    "avatar": {
                                        "href": "https://bitbucket.example.com/john.png"
                                    }
                                }
                            }
                        },
                    }
                ]
            }
        ]
    },
}

BITBUCKET_PULL_REQUEST = {
    "actor": {
        "display_name": "Jane Doe",
        "links": {"avatar": {"href": "https://bitbucket.example.com/jane.png"}},
    },
    "repository": {"full_name": "team/service"},
    "pullrequest": {
        "description": "Refactor settings loader",
        "updated_on": "2024-03-05T11:00:00+00:00",
        "source": {"commit": {"hash": "5ource5ource5ource5ource5ource5ource0000"}},
        "author": {"links": {"avatar": {"href": "https://bitbucket.example.com/pr.png"}}},
    },
}


def make_record(
    record_id=1,
    provider="github",
    payload=None,
    jobs=None,
    **fields,
):
    """Raw backing-store document for one build."""
    record = {
        "id": record_id,
        "provider": provider,
        "jobs": jobs
        if jobs is not None
        else [{"status": "success", "start_time": 100, "end_time": 160}],
        "data": copy.deepcopy(payload if payload is not None else GITHUB_PUSH),
    }
    record.update(fields)
    return record


@pytest.fixture
def record_factory():
    """Factory producing raw build documents."""
    return make_record


@pytest.fixture
def github_push_payload():
    return copy.deepcopy(GITHUB_PUSH)


@pytest.fixture
def github_pull_request_payload():
    return copy.deepcopy(GITHUB_PULL_REQUEST)


@pytest.fixture
def github_commit_payload():
    return copy.deepcopy(GITHUB_COMMIT)


@pytest.fixture
def bitbucket_push_payload():
    return copy.deepcopy(BITBUCKET_PUSH)


@pytest.fixture
def bitbucket_pull_request_payload():
    return copy.deepcopy(BITBUCKET_PULL_REQUEST)
