# The MIT License (MIT)
# Copyright © 2025 Entrius

from .gh_interface import GitHubInterface
from .git_interface import GitInterface
from .orchestrator import MirrorOrchestrator
from .publisher import DiffVerifier, PullRequestPublisher, SessionFinalizer
from .replayer import BranchReplayer, ReplayState

__all__ = [
    "BranchReplayer",
    "DiffVerifier",
    "GitHubInterface",
    "GitInterface",
    "MirrorOrchestrator",
    "PullRequestPublisher",
    "ReplayState",
    "SessionFinalizer",
]
