# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tests for GitInterface command construction with subprocess.run patched out.
"""

import subprocess
from unittest.mock import Mock, patch

import pytest

from prmirror.exceptions import CommandError
from prmirror.mirror.git_interface import GitInterface


def _ok(stdout=''):
    return Mock(stdout=stdout, stderr='', returncode=0)


def _fail(stderr='fatal: error'):
    return subprocess.CalledProcessError(1, ['git'], output='', stderr=stderr)


def _commands(mock_run):
    return [c[0][0] for c in mock_run.call_args_list]


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_commands_run_in_repo_path(mock_run):
    mock_run.return_value = _ok()
    GitInterface('/work/fork').fetch('upstream')
    assert mock_run.call_args[1]['cwd'] == '/work/fork'
    assert mock_run.call_args[0][0] == ['git', 'fetch', 'upstream']


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_fetch_with_refspec(mock_run):
    mock_run.return_value = _ok()
    GitInterface('/r').fetch('upstream', '+pull/42/head:temp-pr-42')
    assert mock_run.call_args[0][0] == ['git', 'fetch', 'upstream', '+pull/42/head:temp-pr-42']


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_fetch_failure_raises(mock_run):
    mock_run.side_effect = _fail("fatal: 'upstream' does not appear to be a git repository")
    with pytest.raises(CommandError, match='does not appear'):
        GitInterface('/r').fetch('upstream')


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_rev_parse_parent(mock_run):
    mock_run.return_value = _ok('p' * 40 + '\n')
    assert GitInterface('/r').rev_parse('abc^') == 'p' * 40
    assert mock_run.call_args[0][0] == ['git', 'rev-parse', '--verify', '--quiet', 'abc^^{commit}']


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_checkout_new_branch(mock_run):
    mock_run.return_value = _ok()
    git = GitInterface('/r')
    git.checkout_new_branch('base-pr-42', 'p' * 40)
    git.checkout_new_branch('pr-42')
    assert _commands(mock_run) == [
        ['git', 'checkout', '-B', 'base-pr-42', 'p' * 40],
        ['git', 'checkout', '-B', 'pr-42'],
    ]


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_push_forces_and_sets_upstream(mock_run):
    mock_run.return_value = _ok()
    GitInterface('/r').push('origin', 'pr-42')
    assert mock_run.call_args[0][0] == ['git', 'push', '-u', 'origin', 'pr-42', '--force']


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_best_effort_deletes_swallow_failures(mock_run):
    mock_run.side_effect = _fail("error: branch 'pr-42' not found.")
    git = GitInterface('/r')
    assert git.delete_branch('pr-42') is False
    assert git.delete_remote_branch('origin', 'pr-42') is False
    assert git.abort_cherry_pick() is False
    assert git.checkout('main', force=True) is False
    assert _commands(mock_run) == [
        ['git', 'branch', '-D', 'pr-42'],
        ['git', 'push', 'origin', '--delete', 'pr-42'],
        ['git', 'cherry-pick', '--abort'],
        ['git', 'checkout', '-f', 'main'],
    ]


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_cherry_pick_reports_conflict(mock_run):
    mock_run.side_effect = [_ok(), _fail('CONFLICT (content): Merge conflict in a.txt')]
    git = GitInterface('/r')
    assert git.cherry_pick('c1') is True
    assert git.cherry_pick('c2') is False


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_stash_detects_new_entry(mock_run):
    mock_run.side_effect = [_fail(''), _ok('Saved working directory'), _ok('s' * 40)]
    assert GitInterface('/r').stash_local_changes() is True
    assert _commands(mock_run)[1] == ['git', 'stash', 'push', '--include-untracked']


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_stash_without_changes(mock_run):
    mock_run.side_effect = [_ok('s' * 40), _ok('No local changes to save'), _ok('s' * 40)]
    assert GitInterface('/r').stash_local_changes() is False


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_restore_failure_is_not_fatal(mock_run):
    mock_run.side_effect = _fail('No stash entries found.')
    assert GitInterface('/r').restore_local_changes() is False


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_git_missing(mock_run):
    mock_run.side_effect = FileNotFoundError()
    with pytest.raises(CommandError, match='git not found'):
        GitInterface('/r').get_remote_url('origin')


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_current_branch(mock_run):
    mock_run.side_effect = [_ok('master\n'), _fail('fatal: ref HEAD is not a symbolic ref')]
    git = GitInterface('/r')
    assert git.current_branch() == 'master'
    assert git.current_branch() is None
    assert _commands(mock_run)[0] == ['git', 'symbolic-ref', '--quiet', '--short', 'HEAD']


@patch('prmirror.mirror.git_interface.subprocess.run')
def test_detach_head_and_branch_exists(mock_run):
    mock_run.side_effect = [_ok(), _fail('')]
    git = GitInterface('/r')
    assert git.detach_head() is True
    assert git.branch_exists('pr-42') is False
    assert _commands(mock_run) == [
        ['git', 'checkout', '-f', '--detach'],
        ['git', 'rev-parse', '--verify', '--quiet', 'refs/heads/pr-42'],
    ]
