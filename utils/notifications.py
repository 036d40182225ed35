"""
Notifications Module - Telegram alerts for new contact messages
"""

import threading

import requests
from flask import current_app
from markupsafe import escape


def get_telegram_credentials(app=None):
    """Admin bot token and chat id from configuration"""
    config = (app or current_app).config
    return config.get('ADMIN_TELEGRAM_BOT_TOKEN'), config.get('ADMIN_TELEGRAM_CHAT_ID')


def send_telegram_notification(message_text, app=None):
    """
    Send a Telegram message to the site owner

    Args:
        message_text (str): Message to send (HTML parse mode)
        app (Flask, optional): Application, when called outside a request

    Returns:
        bool: True if sent successfully, False otherwise
    """
    app = app or current_app._get_current_object()
    bot_token, chat_id = get_telegram_credentials(app)

    if not (bot_token and chat_id):
        app.logger.debug("No Telegram credentials configured, skipping notification")
        return False

    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {
            'chat_id': chat_id,
            'text': message_text,
            'parse_mode': 'HTML'
        }
        response = requests.post(url, json=payload, timeout=10)
        if response.status_code == 200:
            app.logger.info("Telegram notification sent")
            return True
        app.logger.error(f"Telegram API error: {response.status_code}")
        return False
    except requests.RequestException as e:
        app.logger.error(f"Telegram notification error: {str(e)}")
        return False


def notify_new_contact(message):
    """Announce a new contact message without blocking the request"""
    app = current_app._get_current_object()
    bot_token, chat_id = get_telegram_credentials(app)
    if not (bot_token and chat_id):
        return None

    preview = message.message[:200] + ('...' if len(message.message) > 200 else '')
    text = (
        f"📧 <b>New Portfolio Message</b>\n\n"
        f"👤 <b>From:</b> {escape(message.name)}\n"
        f"📧 <b>Email:</b> {escape(message.email)}\n"
        f"💬 <b>Message:</b>\n{escape(preview)}"
    )
    thread = threading.Thread(target=send_telegram_notification, args=(text, app))
    thread.daemon = True
    thread.start()
    return thread


__all__ = ['get_telegram_credentials', 'send_telegram_notification', 'notify_new_contact']
