# The MIT License (MIT)
# Copyright © 2025 Entrius

import json
import logging
import subprocess
from typing import Any, List, Optional, Tuple, Union

from prmirror.classes import PullRequestMetadata, PullRequestReference
from prmirror.constants import PR_VIEW_FIELDS
from prmirror.exceptions import CommandError, EmptyPullRequest


class GitHubInterface:
    """Interface to the hosting platform through the `gh` CLI."""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd
        self.logger = logging.getLogger(__name__)

    def _run_gh_command(self, args: List[str]) -> Tuple[bool, str]:
        """Run a gh command and return success status and output (stderr on failure)."""
        cmd = ['gh'] + args
        self.logger.debug(f"$ {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, cwd=self.cwd, capture_output=True, text=True, check=True)
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            self.logger.debug(f"gh command failed: {' '.join(cmd)}, Error: {e.stderr}")
            return False, e.stderr or str(e)
        except FileNotFoundError:
            raise CommandError(cmd, None, 'gh not found. Please install the GitHub CLI first.')

    def _require(self, args: List[str]) -> str:
        success, output = self._run_gh_command(args)
        if not success:
            self.logger.error(f"gh command failed: gh {' '.join(args)}")
            self.logger.error(f'Error: {output}')
            raise CommandError(['gh'] + args, 1, output)
        return output

    def _require_json(self, args: List[str]) -> Any:
        output = self._require(args)
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise CommandError(['gh'] + args, 0, f'Unparsable JSON output: {e}')

    def fetch_pull_request_metadata(self, reference: PullRequestReference) -> PullRequestMetadata:
        """Fetch title, body, first closing issue and ordered commit ids.

        Raises EmptyPullRequest when the pull request has no commits.
        """
        data = self._require_json(
            ['pr', 'view', str(reference.number), '--repo', reference.gh_repo, '--json', PR_VIEW_FIELDS]
        )
        if not isinstance(data, dict):
            raise CommandError(['gh', 'pr', 'view', str(reference.number)], 0, 'Expected a JSON object')

        commit_ids = tuple(c['oid'] for c in (data.get('commits') or []) if c.get('oid'))
        if not commit_ids:
            raise EmptyPullRequest(reference)

        issues = data.get('closingIssuesReferences') or []
        linked_issue_url = issues[0].get('url') if issues else None

        return PullRequestMetadata(
            title=data.get('title') or '',
            body=data.get('body') or '',
            commit_ids=commit_ids,
            linked_issue_url=linked_issue_url or None,
        )

    def fetch_diff(self, pull_request: Union[PullRequestReference, str]) -> str:
        """Textual diff of a pull request given as a reference or a URL."""
        if isinstance(pull_request, PullRequestReference):
            args = ['pr', 'diff', str(pull_request.number), '--repo', pull_request.gh_repo]
        else:
            args = ['pr', 'diff', pull_request]
        return self._require(args)

    def create_label(self, repo: str, name: str, color: str) -> bool:
        """Create a label; an existing label is not an error."""
        success, output = self._run_gh_command(['label', 'create', name, '--repo', repo, '--color', color])
        if not success:
            self.logger.debug(f'Label {name} not created on {repo}: {output.strip()}')
        return success

    def create_pull_request(self, repo: str, base: str, head: str, title: str, body: str, label: str) -> str:
        """Open a pull request and return its URL."""
        output = self._require(
            [
                'pr', 'create',
                '--repo', repo,
                '--base', base,
                '--head', head,
                '--title', title,
                '--body', body,
                '--label', label,
            ]
        )
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            raise CommandError(['gh', 'pr', 'create', '--repo', repo], 0, 'No pull request URL returned')
        return lines[-1]

    def close_pull_request(self, url: str) -> None:
        self._require(['pr', 'close', url])

    def comment_on_pull_request(self, url: str, text: str) -> None:
        self._require(['pr', 'comment', url, '--body', text])
