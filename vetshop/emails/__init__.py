"""Transactional email rendering and delivery."""

from vetshop.emails.sender import EmailSender
from vetshop.emails.templates import render_admin_order_notification, render_customer_order_confirmation

__all__ = ["EmailSender", "render_admin_order_notification", "render_customer_order_confirmation"]
