"""Lookups that confirm a request's target resource exists."""
from .base import TargetResolver, AcceptAllTargetResolver, InMemoryTargetResolver
from .http_resolver import HttpTargetResolver
