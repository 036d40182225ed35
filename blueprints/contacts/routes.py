"""
Contact Routes - Contact form and admin inbox
"""

from flask import current_app, jsonify
from flask_login import login_required
from extensions import db
from models import ContactMessage
from utils.decorators import rate_limited
from utils.helpers import get_or_404
from utils.notifications import notify_new_contact
from utils.presenters import contact_to_dict
from utils.security import get_client_ip
from utils.validation import get_payload, clean_string, clean_email, raise_if_errors
from . import contacts_bp


@contacts_bp.route('/contact', methods=['POST'])
@rate_limited('contact')
def submit_contact():
    """Handle contact form submission"""
    data = get_payload()

    # Honeypot: bots fill the hidden field, humans leave it empty
    if data.get('website'):
        current_app.logger.warning(f"Honeypot triggered from {get_client_ip()}")
        return jsonify({'message': 'Message sent successfully'}), 200

    errors = {}
    name = clean_string(data, 'name', errors, required=True, max_length=100)
    email = clean_email(data, 'email', errors, required=True)
    subject = clean_string(data, 'subject', errors, max_length=200)
    message = clean_string(data, 'message', errors, required=True, max_length=5000)
    raise_if_errors(errors)

    contact = ContactMessage(
        name=name,
        email=email,
        subject=subject,
        message=message,
        ip_address=get_client_ip()
    )
    db.session.add(contact)
    db.session.commit()

    notify_new_contact(contact)
    current_app.logger.info(f"Contact message {contact.id} received from {email}")
    return jsonify({'message': 'Message sent successfully'}), 201


@contacts_bp.route('/admin/contacts', methods=['GET'])
@login_required
def list_contacts():
    messages = ContactMessage.query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc()).all()
    return jsonify({
        'messages': [contact_to_dict(m) for m in messages],
        'unread': sum(1 for m in messages if not m.is_read)
    }), 200


@contacts_bp.route('/admin/contacts/<int:contact_id>', methods=['DELETE'])
@login_required
def delete_contact(contact_id):
    contact = get_or_404(ContactMessage, contact_id, 'Message')
    db.session.delete(contact)
    db.session.commit()
    current_app.logger.info(f"Contact message {contact_id} deleted")
    return jsonify({'message': 'Message deleted successfully'}), 200
