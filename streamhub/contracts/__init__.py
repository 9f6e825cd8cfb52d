"""
Contracts

Shared identity, error and signal types. Every other layer depends on this
package and nothing else inside ``streamhub``.
"""

from .base import (
    ErrorCode,
    StreamHubError,
    BootstrapError,
    StreamError,
    ClientError,
    CollectionIdentity,
    DataAvailable,
    StreamFailed,
    StreamClosed,
    Signal,
)

__all__ = [
    'ErrorCode',
    'StreamHubError',
    'BootstrapError',
    'StreamError',
    'ClientError',
    'CollectionIdentity',
    'DataAvailable',
    'StreamFailed',
    'StreamClosed',
    'Signal',
]
