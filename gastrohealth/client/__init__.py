# -*- coding: utf-8 -*-
"""GastroHealth client: token store, API gateway, session state machine, views."""

from .errors import AuthenticationError, ClientError, FormValidationError, RequestError, SessionStateError
from .gateway import ApiGatewayClient
from .router import View, ViewRouter
from .session import Session, SessionController, SessionState
from .token_store import FileTokenStorage, MemoryTokenStorage, TokenStore

__all__ = [
    'ApiGatewayClient',
    'AuthenticationError',
    'ClientError',
    'FileTokenStorage',
    'FormValidationError',
    'MemoryTokenStorage',
    'RequestError',
    'Session',
    'SessionController',
    'SessionState',
    'SessionStateError',
    'TokenStore',
    'View',
    'ViewRouter',
]
