#!/usr/bin/env python3
"""
Relay API Schemas - Pydantic Models for the webhook payload
"""

from typing import Optional
from pydantic import BaseModel


class HeadCommit(BaseModel):
    message: Optional[str] = None


class Repository(BaseModel):
    name: Optional[str] = None


class PushEvent(BaseModel):
    """The parts of a repository push event the relay logs; everything else is ignored."""
    head_commit: Optional[HeadCommit] = None
    repository: Optional[Repository] = None

    @property
    def commit_message(self) -> Optional[str]:
        return self.head_commit.message if self.head_commit else None

    @property
    def repository_name(self) -> Optional[str]:
        return self.repository.name if self.repository else None
