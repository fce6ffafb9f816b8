"""
Configuration du XRPL Launch Alert
"""

import os
import json
import logging
from typing import Dict, Any

logger = logging.getLogger("config")

CONFIG_FILE = "config.json"

# Toujours lus depuis l'environnement s'ils y sont définis
SECRET_KEYS = ("API_ID", "API_HASH", "SESSION_STRING", "BOT_TOKEN", "BOT_CHAT_ID")

# Configuration par défaut
DEFAULT_CONFIG = {
    # Telegram user session (announcement feed)
    "API_ID": 0,
    "API_HASH": "",
    "SESSION_STRING": "",
    "CHANNEL_USERNAME": "",

    # Notifier
    "BOT_TOKEN": "",
    "BOT_CHAT_ID": "",
    "NOTIFY_MAX_ATTEMPTS": 1,
    "NOTIFY_RETRY_DELAY": 1.0,

    # Event channel
    "REDIS_URL": "redis://localhost:6379/0",
    "EVENT_TOPIC": "newtokens",
    "REDIS_PUBLISH_TIMEOUT": 5.0,
    "REDIS_CONNECT_TIMEOUT": 5.0,

    # Ledger
    "XRPL_WEBSOCKET_URL": "wss://s1.ripple.com/",
    "LEDGER_RECONNECT_DELAY": 5,
    "LEDGER_QUERY_TIMEOUT": 10.0,
    "LEDGER_QUERY_MAX_ATTEMPTS": 1,

    # Watches
    "WATCH_TTL_SECONDS": 3 * 3600,
    "WATCH_CLEANUP_INTERVAL": 60,

    # System
    "LOG_LEVEL": "INFO"
}

def load_config(config_file: str = CONFIG_FILE) -> Dict[str, Any]:
    """
    Charge la configuration depuis le fichier config.json
    Si le fichier n'existe pas, crée un fichier avec la configuration par défaut

    Returns:
        Dictionnaire de configuration
    """
    if os.environ.get("USE_ENV_CONFIG", "").lower() == "true":
        logger.info("Chargement de la configuration depuis les variables d'environnement")
        return load_config_from_env()

    if not os.path.exists(config_file):
        with open(config_file, "w") as f:
            json.dump(DEFAULT_CONFIG, f, indent=2)
        logger.info(f"Fichier de configuration créé: {config_file}")
        config = dict(DEFAULT_CONFIG)
    else:
        try:
            with open(config_file, "r") as f:
                config = json.load(f)
            logger.info(f"Configuration chargée depuis: {config_file}")
        except Exception as e:
            logger.error(f"Erreur lors du chargement de la configuration: {e}")
            logger.info("Utilisation de la configuration par défaut")
            config = dict(DEFAULT_CONFIG)

    # Fusion avec les clés manquantes
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    # Les secrets de l'environnement priment sur le fichier
    for key in SECRET_KEYS:
        env_value = os.environ.get(key)
        if env_value:
            config[key] = _coerce(key, env_value, DEFAULT_CONFIG[key])

    return config

def load_config_from_env() -> Dict[str, Any]:
    """
    Charge la configuration depuis les variables d'environnement

    Returns:
        Dictionnaire de configuration
    """
    config = {}

    for key, default_value in DEFAULT_CONFIG.items():
        env_value = os.environ.get(key)

        if env_value is not None:
            config[key] = _coerce(key, env_value, default_value)
        else:
            config[key] = default_value

    return config

def _coerce(key: str, env_value: str, default_value: Any) -> Any:
    try:
        if isinstance(default_value, bool):
            return env_value.lower() == "true"
        elif isinstance(default_value, int):
            return int(env_value)
        elif isinstance(default_value, float):
            return float(env_value)
        return env_value
    except ValueError as parse_err:
        logger.warning(f"Impossible de parser la variable d'env {key}: {parse_err}. Valeur par défaut utilisée.")
        return default_value
