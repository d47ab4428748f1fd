"""
Configuration from defaults, environment variables and keyword overrides.
"""

import os
from typing import Any, Dict

DEFAULTS: Dict[str, Any] = {
    'rr_app_key': None,
    'rr_url': "https://api.radioreference.com/soap2/",
    'rpc_timeout': None,
    'gemini_api_key': None,
    'gemini_model': "gemini-2.0-flash",
    'use_search_grounding': True,
    'cache_backend': "file",
    'cache_dir': ".ff_cache",
    'supabase_url': None,
    'supabase_key': None,
    'cache_table': "search_cache",
    'max_workers': 10,
    'max_system_workers': 1,
    'max_subcategories': 150,
    'max_systems': 50,
}


def _flag(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def _from_env() -> Dict[str, Any]:
    env = os.environ
    config: Dict[str, Any] = {}

    for key, var in (
        ('rr_app_key', "RR_APP_KEY"),
        ('rr_url', "RR_SOAP_URL"),
        ('gemini_api_key', "GEMINI_API_KEY"),
        ('gemini_model', "GEMINI_MODEL"),
        ('cache_backend', "FREQFINDER_CACHE"),
        ('cache_dir', "FREQFINDER_CACHE_DIR"),
        ('supabase_url', "SUPABASE_URL"),
        ('cache_table', "FREQFINDER_CACHE_TABLE"),
    ):
        if env.get(var):
            config[key] = env[var]

    supabase_key = env.get("SUPABASE_KEY") or env.get("SUPABASE_ANON_KEY")
    if supabase_key:
        config['supabase_key'] = supabase_key

    if env.get("RR_TIMEOUT"):
        config['rpc_timeout'] = float(env["RR_TIMEOUT"])
    if env.get("GEMINI_USE_SEARCH"):
        config['use_search_grounding'] = _flag(env["GEMINI_USE_SEARCH"])
    if env.get("FREQFINDER_MAX_WORKERS"):
        config['max_workers'] = int(env["FREQFINDER_MAX_WORKERS"])
    if env.get("FREQFINDER_MAX_SYSTEM_WORKERS"):
        config['max_system_workers'] = int(env["FREQFINDER_MAX_SYSTEM_WORKERS"])

    return config


def load_config(**overrides) -> Dict[str, Any]:
    """
    Build the client configuration.

    Keyword overrides win over environment variables, which win over
    ``DEFAULTS``. Unknown keys are rejected.
    """
    unknown = set(overrides) - set(DEFAULTS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
    return {**DEFAULTS, **_from_env(), **overrides}
