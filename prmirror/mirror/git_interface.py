# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
import subprocess
from typing import List, Optional, Tuple

from prmirror.exceptions import CommandError


class GitInterface:
    """Runs git commands against one working tree."""

    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self.logger = logging.getLogger(__name__)

    def _run_git_command(self, args: List[str]) -> Tuple[bool, str, str]:
        """Run a git command and return success status, stdout and stderr."""
        cmd = ['git'] + args
        self.logger.debug(f"$ {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
            return True, result.stdout.strip(), result.stderr.strip()
        except subprocess.CalledProcessError as e:
            self.logger.debug(f"Git command failed: {' '.join(cmd)}, Error: {e.stderr}")
            return False, (e.stdout or '').strip(), (e.stderr or str(e)).strip()
        except FileNotFoundError:
            raise CommandError(cmd, None, 'git not found. Please install git first.')

    def _require(self, args: List[str]) -> str:
        """Run a git command whose failure aborts the session."""
        success, output, error = self._run_git_command(args)
        if not success:
            self.logger.error(f"Git command failed: git {' '.join(args)}")
            self.logger.error(f'Error: {error}')
            raise CommandError(['git'] + args, 1, error)
        return output

    def _attempt(self, args: List[str]) -> bool:
        """Run a best-effort git command; failure is only logged."""
        success, _, error = self._run_git_command(args)
        if not success:
            self.logger.debug(f"Ignored failure of git {' '.join(args)}: {error}")
        return success

    # -------------------------------------------------------------------------
    # Working tree
    # -------------------------------------------------------------------------

    def _stash_head(self) -> Optional[str]:
        success, output, _ = self._run_git_command(['rev-parse', '--quiet', '--verify', 'refs/stash'])
        return output if success else None

    def stash_local_changes(self) -> bool:
        """Stash tracked and untracked changes. Returns True if a stash entry was created."""
        before = self._stash_head()
        self._require(['stash', 'push', '--include-untracked'])
        stashed = self._stash_head() != before
        if stashed:
            self.logger.info('Stashed local changes')
        return stashed

    def restore_local_changes(self) -> bool:
        """Pop the most recent stash entry; failure is not fatal."""
        restored = self._attempt(['stash', 'pop'])
        if restored:
            self.logger.info('Restored local changes')
        else:
            self.logger.warning('Could not restore stashed changes; run `git stash pop` manually')
        return restored

    def checkout(self, ref: str, force: bool = False) -> bool:
        args = ['checkout', '-f', ref] if force else ['checkout', ref]
        return self._attempt(args)

    def detach_head(self) -> bool:
        """Leave every branch, keeping HEAD at the current commit."""
        return self._attempt(['checkout', '-f', '--detach'])

    def current_branch(self) -> Optional[str]:
        """Name of the checked-out branch, or None when HEAD is detached."""
        success, output, _ = self._run_git_command(['symbolic-ref', '--quiet', '--short', 'HEAD'])
        return output if success and output else None

    # -------------------------------------------------------------------------
    # Refs
    # -------------------------------------------------------------------------

    def fetch(self, remote: str, refspec: Optional[str] = None) -> None:
        args = ['fetch', remote] + ([refspec] if refspec else [])
        self._require(args)

    def rev_parse(self, rev: str) -> str:
        """Resolve a revision expression to a full commit id."""
        return self._require(['rev-parse', '--verify', '--quiet', f'{rev}^{{commit}}'])

    def checkout_new_branch(self, name: str, start_point: Optional[str] = None) -> None:
        """Create or reset `name` at `start_point` (HEAD when omitted) and switch to it."""
        args = ['checkout', '-B', name] + ([start_point] if start_point else [])
        self._require(args)

    def delete_branch(self, name: str) -> bool:
        """Force-delete a local branch; an absent branch is not an error."""
        return self._attempt(['branch', '-D', name])

    def branch_exists(self, name: str) -> bool:
        success, _, _ = self._run_git_command(['rev-parse', '--verify', '--quiet', f'refs/heads/{name}'])
        return success

    def get_remote_url(self, remote: str) -> str:
        return self._require(['remote', 'get-url', remote])

    # -------------------------------------------------------------------------
    # Replay
    # -------------------------------------------------------------------------

    def cherry_pick(self, commit: str) -> bool:
        """Apply one commit onto HEAD, keeping its author and message."""
        success, _, error = self._run_git_command(['cherry-pick', commit])
        if not success:
            self.logger.error(f'Cherry-pick of {commit} failed: {error}')
        return success

    def abort_cherry_pick(self) -> bool:
        return self._attempt(['cherry-pick', '--abort'])

    # -------------------------------------------------------------------------
    # Remote branches
    # -------------------------------------------------------------------------

    def push(self, remote: str, branch: str, force: bool = True, set_upstream: bool = True) -> None:
        args = ['push']
        if set_upstream:
            args.append('-u')
        args += [remote, branch]
        if force:
            args.append('--force')
        self._require(args)

    def delete_remote_branch(self, remote: str, branch: str) -> bool:
        """Delete a branch on the remote; an absent branch is not an error."""
        return self._attempt(['push', remote, '--delete', branch])
