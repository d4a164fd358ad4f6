"""
Repository layer for StageVault.

All document store access lives here and ONLY here.
"""

from stagevault.repos.person_repo import PersonRepo
from stagevault.repos.recording_repo import RecordingRepo
from stagevault.repos.theatre_repo import TheatreRepo
from stagevault.repos.user_repo import UserRepo

__all__ = [
    "TheatreRepo",
    "PersonRepo",
    "RecordingRepo",
    "UserRepo",
]
