# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared fixtures: in-memory stand-ins for the git and gh interfaces.

FakeGit models local branches, remote branches on the fork, a stash and a
dirty working tree closely enough to check which refs a session leaves behind.
"""

import pytest

from prmirror.classes import PullRequestMetadata
from prmirror.config import MirrorConfig
from prmirror.exceptions import EmptyPullRequest

PARENT = 'p' * 40
C1 = '1' * 40
C2 = '2' * 40
C3 = '3' * 40
UPSTREAM_TIP = 'f' * 40


class FakeGit:
    def __init__(self, parents=None, conflicts=(), dirty=False):
        self.parents = dict(parents or {})
        self.conflicts = set(conflicts)
        self.dirty = dirty
        self.stash = []
        self.head = 'main'
        self.local_branches = {'main': [UPSTREAM_TIP]}
        self.remote_branches = {'main': [UPSTREAM_TIP]}
        self.fetched = []
        self.in_cherry_pick = False
        self.calls = []
        self.remote_url = 'git@github.com:me/fork.git'
        self.undeletable = set()

    def stash_local_changes(self):
        self.calls.append(('stash',))
        if not self.dirty:
            return False
        self.stash.append('changes')
        self.dirty = False
        return True

    def restore_local_changes(self):
        self.calls.append(('stash_pop',))
        if not self.stash:
            return False
        self.stash.pop()
        self.dirty = True
        return True

    def checkout(self, ref, force=False):
        self.calls.append(('checkout', ref))
        if ref not in self.local_branches:
            return False
        self.head = ref
        return True

    def detach_head(self):
        self.calls.append(('detach',))
        self.head = None
        return True

    def current_branch(self):
        self.calls.append(('current_branch',))
        return self.head

    def fetch(self, remote, refspec=None):
        self.calls.append(('fetch', remote, refspec))
        self.fetched.append((remote, refspec))
        if refspec:
            self.local_branches[refspec.split(':', 1)[1]] = ['pr-head']

    def rev_parse(self, rev):
        self.calls.append(('rev_parse', rev))
        return self.parents[rev.rstrip('^')]

    def checkout_new_branch(self, name, start_point=None):
        self.calls.append(('checkout_new_branch', name, start_point))
        commits = [start_point] if start_point else list(self.local_branches[self.head])
        self.local_branches[name] = commits
        self.head = name

    def delete_branch(self, name):
        self.calls.append(('delete_branch', name))
        # git refuses to delete the checked-out branch
        if name == self.head or name in self.undeletable:
            return False
        return self.local_branches.pop(name, None) is not None

    def branch_exists(self, name):
        return name in self.local_branches

    def push(self, remote, branch, force=True, set_upstream=True):
        self.calls.append(('push', remote, branch))
        self.remote_branches[branch] = list(self.local_branches[branch])

    def delete_remote_branch(self, remote, branch):
        self.calls.append(('delete_remote_branch', remote, branch))
        return self.remote_branches.pop(branch, None) is not None

    def cherry_pick(self, commit):
        self.calls.append(('cherry_pick', commit))
        if commit in self.conflicts:
            self.in_cherry_pick = True
            return False
        self.local_branches[self.head].append(commit)
        return True

    def abort_cherry_pick(self):
        self.calls.append(('cherry_pick_abort',))
        was_running = self.in_cherry_pick
        self.in_cherry_pick = False
        return was_running

    def get_remote_url(self, remote):
        self.calls.append(('remote_url', remote))
        return self.remote_url

    def session_refs(self, session):
        """Session branches still present locally or on the fork."""
        local = [b for b in session.branches if b in self.local_branches]
        remote = [b for b in session.remote_branches if b in self.remote_branches]
        return local + remote


class FakeGitHub:
    def __init__(self, metadata, original_diff='diff --git a/x b/x\n', mirrored_diff=None):
        self.metadata = metadata
        self.original_diff = original_diff
        self.mirrored_diff = original_diff if mirrored_diff is None else mirrored_diff
        self.labels = set()
        self.created = []
        self.closed = []
        self.comments = []
        self.calls = []
        self.new_url = 'https://github.com/me/fork/pull/7'

    def fetch_pull_request_metadata(self, reference):
        self.calls.append(('view', reference.number))
        if not self.metadata.commit_ids:
            raise EmptyPullRequest(reference)
        return self.metadata

    def fetch_diff(self, pull_request):
        self.calls.append(('diff', pull_request))
        if isinstance(pull_request, str):
            return self.mirrored_diff
        return self.original_diff

    def create_label(self, repo, name, color):
        self.calls.append(('label', repo, name, color))
        if name in self.labels:
            return False
        self.labels.add(name)
        return True

    def create_pull_request(self, repo, base, head, title, body, label):
        self.calls.append(('create', repo))
        self.created.append({'repo': repo, 'base': base, 'head': head, 'title': title, 'body': body, 'label': label})
        return self.new_url

    def close_pull_request(self, url):
        self.calls.append(('close', url))
        self.closed.append(url)

    def comment_on_pull_request(self, url, text):
        self.calls.append(('comment', url))
        self.comments.append((url, text))


@pytest.fixture
def config(tmp_path):
    return MirrorConfig(repo_path=str(tmp_path))


@pytest.fixture
def metadata():
    return PullRequestMetadata(
        title='Add os.dnsresolve',
        body='Implements DNS resolution.',
        commit_ids=(C1, C2, C3),
        linked_issue_url='https://github.com/PlutoLang/Pluto/issues/1300',
    )


@pytest.fixture
def fake_git(make_git):
    return make_git()


@pytest.fixture
def fake_github(metadata):
    return FakeGitHub(metadata)


@pytest.fixture
def parent_commit():
    return PARENT


@pytest.fixture
def make_git():
    """Factory for a FakeGit whose first PR commit has PARENT as parent."""

    def _make(conflicts=(), dirty=True):
        return FakeGit(parents={C1: PARENT}, conflicts=conflicts, dirty=dirty)

    return _make


@pytest.fixture
def make_github(metadata):
    def _make(metadata=metadata, **kwargs):
        return FakeGitHub(metadata, **kwargs)

    return _make
