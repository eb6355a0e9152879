#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional

import pytz
import yaml
from dotenv import load_dotenv

LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

DEFAULT_REMINDER_OFFSETS = ["24 hours", "2 hours", "15 minutes"]

# Seconds per duration unit accepted in reminder offsets
DURATION_UNITS = {
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 604800,
}

_DURATION_RE = re.compile(r"^(\d+)\s+(minute|hour|day|week)s?$", re.IGNORECASE)


class ConfigError(Exception):
    """Configuration is missing, unreadable or invalid."""
    pass


@dataclass
class DiscordConfig:
    """Discord connection and channel settings"""
    bot_token: str = ""
    channel_id_status: str = ""
    channel_id_join_leave: str = ""
    channel_id_events: str = ""
    status_title: str = "Online players"
    cache_path: str = "cache.txt"
    show_join_leave: bool = True
    pin_player_list: bool = True


@dataclass
class EventerConfig:
    """Scheduled event announcements and reminders"""
    enabled: bool = False
    reminder_offsets: List[timedelta] = field(
        default_factory=lambda: parse_durations(DEFAULT_REMINDER_OFFSETS)
    )
    tick_seconds: float = 1.0
    timezone: str = "Europe/Berlin"
    language: str = "de"


@dataclass
class PresenceConfig:
    """Presence snapshot intake"""
    nats_servers: List[str] = field(default_factory=lambda: ["nats://localhost:4222"])
    subject: str = "dodobot.presence.snapshot"
    queue_size: int = 100
    emit_events: bool = False


@dataclass
class BotConfig:
    """Complete bot configuration"""
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    eventer: EventerConfig = field(default_factory=EventerConfig)
    presence: PresenceConfig = field(default_factory=PresenceConfig)
    log_file: str = "-"
    log_level: str = "info"


def configure_logger(logger,
                     log_file=None,
                     log_format=LOG_FORMAT,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string, "-" or None for stderr
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    # Create file handler if path string, otherwise stream handler
    if isinstance(log_file, str) and log_file != "-":
        handler = logging.FileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler()  # stderr

    # Get logger by name if string provided
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(name: str) -> int:
    """Parse a log level name ("info", "DEBUG") into a logging constant"""
    level = getattr(logging, str(name).upper(), None)
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {name!r}")
    return level


def parse_duration(text: str) -> timedelta:
    """Parse "<n> <unit>" where unit is minute(s), hour(s), day(s) or week(s)

    Raises:
        ConfigError: If the format or unit is invalid
    """
    match = _DURATION_RE.match(str(text).strip())
    if not match:
        raise ConfigError(f"Invalid duration format: {text!r}")
    amount = int(match.group(1))
    unit = match.group(2).lower()
    return timedelta(seconds=amount * DURATION_UNITS[unit])


def parse_durations(values) -> List[timedelta]:
    """Parse a list (or comma-separated string) of durations"""
    if isinstance(values, str):
        values = values.split(",")
    return [parse_duration(v) for v in values if str(v).strip()]


def load_timezone(name: str):
    """Load the display timezone

    Raises:
        ConfigError: If the zone is unknown; the bot must not start
                     without it since every rendered time depends on it
    """
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigError(f"Unknown display timezone: {name!r}") from e


def _as_bool(value, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _as_str(value) -> str:
    return "" if value is None else str(value)


def parse_config(conf: Mapping[str, Any]) -> BotConfig:
    """Build and validate a BotConfig from a configuration dictionary

    Args:
        conf: Dictionary shaped like the JSON/YAML config file

    Returns:
        Validated BotConfig

    Raises:
        ConfigError: If required values are missing or invalid
    """
    discord_conf = conf.get('discord') or {}
    eventer_conf = discord_conf.get('eventer') or conf.get('eventer') or {}
    presence_conf = conf.get('presence') or {}

    status_channel = _as_str(discord_conf.get('channelIDStatus'))
    discord = DiscordConfig(
        bot_token=_as_str(discord_conf.get('botToken')),
        channel_id_status=status_channel,
        channel_id_join_leave=_as_str(discord_conf.get('channelIDJoinLeave')) or status_channel,
        channel_id_events=_as_str(discord_conf.get('channelIDEvents')),
        status_title=discord_conf.get('statusTitle') or DiscordConfig.status_title,
        cache_path=discord_conf.get('cachePath') or DiscordConfig.cache_path,
        show_join_leave=_as_bool(discord_conf.get('showJoinLeave'), True),
        pin_player_list=_as_bool(discord_conf.get('pinPlayerList'), True),
    )

    raw_offsets = eventer_conf.get('reminderOffsets') or DEFAULT_REMINDER_OFFSETS
    eventer = EventerConfig(
        enabled=_as_bool(eventer_conf.get('enabled'), False),
        reminder_offsets=parse_durations(raw_offsets),
        tick_seconds=float(eventer_conf.get('tickSeconds') or 1.0),
        timezone=eventer_conf.get('timezone') or EventerConfig.timezone,
        language=eventer_conf.get('language') or EventerConfig.language,
    )

    servers = presence_conf.get('natsServers') or ["nats://localhost:4222"]
    if isinstance(servers, str):
        servers = [s.strip() for s in servers.split(",") if s.strip()]
    presence = PresenceConfig(
        nats_servers=list(servers),
        subject=presence_conf.get('subject') or PresenceConfig.subject,
        queue_size=int(presence_conf.get('queueSize') or 100),
        emit_events=_as_bool(presence_conf.get('emitEvents'), False),
    )

    config = BotConfig(
        discord=discord,
        eventer=eventer,
        presence=presence,
        log_file=conf.get('logFile') or "-",
        log_level=conf.get('logLevel') or "info",
    )
    validate_config(config)
    return config


def validate_config(config: BotConfig) -> None:
    """Reject configurations the bot cannot run with

    Raises:
        ConfigError: On the first problem found
    """
    if not config.discord.bot_token:
        raise ConfigError("No discord bot token configured")
    if not config.discord.channel_id_status:
        raise ConfigError("No discord status channel ID configured")
    if config.eventer.enabled and config.discord.channel_id_events in ("", "-"):
        raise ConfigError("Missing eventer channel definition")
    if config.eventer.tick_seconds <= 0:
        raise ConfigError("Eventer tick interval must be positive")
    if config.presence.queue_size <= 0:
        raise ConfigError("Presence queue size must be positive")
    parse_log_level(config.log_level)
    load_timezone(config.eventer.timezone)


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Translate environment variables into a configuration dictionary

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Dictionary in the same shape as the config file
    """
    env = os.environ if environ is None else environ

    return {
        'logFile': env.get('LOG_FILE', '-'),
        'logLevel': env.get('LOG_LEVEL', 'info'),
        'discord': {
            'botToken': env.get('DISCORD_BOT_TOKEN', ''),
            'channelIDStatus': env.get('DISCORD_CHANNEL_ID_STATUS', ''),
            'channelIDJoinLeave': env.get('DISCORD_CHANNEL_ID_JOINLEAVE', ''),
            'channelIDEvents': env.get('DISCORD_CHANNEL_ID_EVENTS', ''),
            'statusTitle': env.get('DISCORD_STATUS_TITLE', ''),
            'cachePath': env.get('DISCORD_CACHE_PATH', ''),
            'showJoinLeave': env.get('DISCORD_SHOW_JOINLEAVE', 'true'),
            'pinPlayerList': env.get('DISCORD_PIN_PLAYERLIST', 'true'),
            'eventer': {
                'enabled': env.get('EVENTER_ENABLED', 'false'),
                'reminderOffsets': env.get('EVENTER_REMINDERS', ''),
                'tickSeconds': env.get('EVENTER_TICK_SECONDS', ''),
                'timezone': env.get('EVENTER_TIMEZONE', ''),
                'language': env.get('EVENTER_LANGUAGE', ''),
            },
        },
        'presence': {
            'natsServers': env.get('NATS_SERVERS', ''),
            'subject': env.get('PRESENCE_SUBJECT', ''),
            'queueSize': env.get('PRESENCE_QUEUE_SIZE', ''),
            'emitEvents': env.get('PRESENCE_EMIT_EVENTS', 'false'),
        },
    }


def read_config_file(config_file: str) -> Dict[str, Any]:
    """Load a JSON or YAML configuration file, chosen by extension

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(config_file, 'r', encoding='utf-8') as fp:
            if config_file.endswith(('.yaml', '.yml')):
                conf = yaml.safe_load(fp)
            else:
                conf = json.load(fp)
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_file}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse config file {config_file}: {e}") from e

    if not isinstance(conf, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")
    return conf


def get_config(config_file: Optional[str] = None, env_file: Optional[str] = None) -> BotConfig:
    """Load configuration from a file, or from the environment

    Without a config file, variables are read from the environment after
    loading an optional .env file.

    Args:
        config_file: Path to a JSON or YAML file
        env_file: Path to a .env file (defaults to ./.env when present)

    Returns:
        Validated BotConfig

    Raises:
        ConfigError: If configuration is missing or invalid
    """
    if config_file:
        return parse_config(read_config_file(config_file))

    load_dotenv(env_file or os.path.join(os.getcwd(), '.env'))
    return parse_config(config_from_env())
