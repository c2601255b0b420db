"""Accessors for the collaborators wired into the app by create_app()."""
from __future__ import annotations

from flask import current_app

from session_gateway.config import AppConfig
from session_gateway.core.challenge import ChallengeCodec
from session_gateway.core.session_proxy import SessionProxy

PROXY_EXTENSION = "session_proxy"
CODEC_EXTENSION = "challenge_codec"


def get_config() -> AppConfig:
    return current_app.config["APP_CONFIG"]


def get_proxy() -> SessionProxy:
    try:
        return current_app.extensions[PROXY_EXTENSION]
    except KeyError as e:
        raise RuntimeError("Session proxy not initialized. Use create_app().") from e


def get_codec() -> ChallengeCodec:
    codec = current_app.extensions.get(CODEC_EXTENSION)
    if codec is None:
        cfg = current_app.config.get("APP_CONFIG")
        codec = ChallengeCodec(cfg.challenge_realm if cfg else None)
    return codec
