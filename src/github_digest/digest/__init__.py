"""Digest generation and email delivery."""

from .generator import Digest, build_digest, format_summary
from .sender import DIGEST_SUBJECT, SmtpMailer

__all__ = ["Digest", "build_digest", "format_summary", "DIGEST_SUBJECT", "SmtpMailer"]
