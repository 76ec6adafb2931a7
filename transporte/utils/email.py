import os
import asyncio
from email.message import EmailMessage
from typing import Optional
import aiosmtplib
import logging

logger = logging.getLogger("transporte.email")


def _smtp_config():
    port = int(os.environ.get("SMTP_PORT", "465"))
    user = os.environ.get("SMTP_USER")
    return {
        "host": os.environ.get("SMTP_HOST"),
        "port": port,
        "user": user,
        "password": os.environ.get("SMTP_PASS"),
        "sender": os.environ.get("SMTP_FROM") or user,
        "ssl": os.environ.get("SMTP_SSL", "true").lower() in ("1", "true", "yes"),
    }


async def _send_message(message: EmailMessage):
    cfg = _smtp_config()
    if not cfg["host"] or not cfg["user"] or not cfg["password"]:
        raise RuntimeError("SMTP not configured (SMTP_HOST/SMTP_USER/SMTP_PASS)")
    use_tls = cfg["ssl"] or cfg["port"] == 465
    start_tls = not use_tls and cfg["port"] in (587, 25)
    logger.info(f"Enviando e-mail para {message['To']} via {cfg['host']}:{cfg['port']} TLS={use_tls} STARTTLS={start_tls}")
    await aiosmtplib.send(
        message,
        hostname=cfg["host"],
        port=cfg["port"],
        username=cfg["user"],
        password=cfg["password"],
        start_tls=start_tls,
        use_tls=use_tls,
    )
    logger.info(f"E-mail enviado para {message['To']} com sucesso.")


def build_reset_email(to_email: str, reset_url: str, expira_em_minutos: int = 60, subject: Optional[str] = None) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = _smtp_config()["sender"] or "no-reply@localhost"
    msg["To"] = to_email
    msg["Subject"] = subject or "Gestão de Transportes: redefinição de senha"
    msg.set_content(
        "Uma redefinição de senha foi pedida para esta conta.\n\n"
        f"Abra o endereço abaixo em até {expira_em_minutos} minutos para escolher a nova senha:\n{reset_url}\n\n"
        "Se o pedido não foi seu, nada muda enquanto o link não for usado."
    )
    msg.add_alternative(
        f"""
    <html>
        <body style='font-family: Arial, sans-serif;'>
            <p>Uma redefinição de senha foi pedida para esta conta.</p>
            <p><a href='{reset_url}'>Escolher nova senha</a> (válido por {expira_em_minutos} minutos)</p>
            <p style='color:#6b7280;font-size:13px;'>Se o pedido não foi seu, nada muda enquanto o link não for usado.</p>
        </body>
    </html>
    """,
        subtype="html",
        charset="utf-8",
    )
    return msg


def send_reset_email_sync(to_email: str, reset_url: str, expira_em_minutos: int = 60):
    """Run from a background task; delivery problems are logged, never raised."""
    msg = build_reset_email(to_email, reset_url, expira_em_minutos)
    try:
        asyncio.run(_send_message(msg))
    except RuntimeError as e:
        logger.warning(f"Reset email skipped: {e}")
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send reset email: {e}")
