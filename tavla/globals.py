# tavla/globals.py

import datetime
import logging
from flask import has_app_context
from tavla.services.logging_service import log_event_to_file

logger = logging.getLogger("tavla.events")


def log_event(event_type, message, sid=None, game_id=None, extra_data=None):
    """
    Структурированная запись игрового события в EVENT_LOG_FILE.
    Вне контекста приложения пишет в обычный логгер.
    """
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    log_entry = f"[{timestamp}] [TYPE: {event_type}]"

    if sid:
        log_entry += f" [SID: {sid}]"
    if game_id:
        log_entry += f" [GameID: {game_id}]"
    if extra_data:
        log_entry += f" [Data: {extra_data}]"

    log_entry += f" | {message}\n"

    logger.debug(log_entry.rstrip())
    if has_app_context():
        log_event_to_file(log_entry)
