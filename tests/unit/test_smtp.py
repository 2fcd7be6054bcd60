"""Unit tests for SMTP URL parsing and SmtpTransport."""

import smtplib
from email.message import EmailMessage

import pytest

from infrastructure.email.smtp import SmtpEndpoint, SmtpTransport, parse_smtp_url
from schemas.models.credentials import MailCredentials


def _message() -> EmailMessage:
    message = EmailMessage()
    message["From"] = "noreply@hovinen.tech"
    message["To"] = "bradford@hovinen.tech"
    message["Subject"] = "Test"
    message.set_content("Test message")
    return message


class TestParseSmtpUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            (
                "smtps://email-smtp.eu-north-1.amazonaws.com",
                SmtpEndpoint("email-smtp.eu-north-1.amazonaws.com", 465, implicit_tls=True),
            ),
            ("smtp://localhost:2525", SmtpEndpoint("localhost", 2525)),
            ("smtp://mail.internal", SmtpEndpoint("mail.internal", 25)),
            (
                "smtp://mail.internal?tls=required",
                SmtpEndpoint("mail.internal", 587, starttls=True),
            ),
            ("SMTPS://Mail.Internal:2465", SmtpEndpoint("mail.internal", 2465, implicit_tls=True)),
        ],
        ids=["smtps_default_port", "smtp_port", "smtp_default_port", "starttls", "case"],
    )
    def test_valid(self, url, expected):
        assert parse_smtp_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        ["http://localhost", "smtp://", "localhost:25", "smtp://localhost:notaport"],
    )
    def test_invalid(self, url):
        with pytest.raises(ValueError):
            parse_smtp_url(url)

    def test_only_smtps_is_encrypted(self):
        assert parse_smtp_url("smtps://host").encrypted
        assert not parse_smtp_url("smtp://host").encrypted
        assert not parse_smtp_url("smtp://host?tls=required").encrypted


class TestSmtpTransport:
    async def test_plain_send_without_auth(self, mocker):
        smtp_cls = mocker.patch("infrastructure.email.smtp.smtplib.SMTP")
        server = smtp_cls.return_value.__enter__.return_value
        message = _message()

        await SmtpTransport(SmtpEndpoint("localhost", 2525), timeout=3.0).send(message)

        smtp_cls.assert_called_once_with("localhost", 2525, timeout=3.0)
        server.starttls.assert_not_called()
        server.auth.assert_not_called()
        server.send_message.assert_called_once_with(message)

    async def test_implicit_tls_with_plain_auth(self, mocker):
        ssl_cls = mocker.patch("infrastructure.email.smtp.smtplib.SMTP_SSL")
        server = ssl_cls.return_value.__enter__.return_value
        credentials = MailCredentials(username="user", password="pass")
        transport = SmtpTransport(
            SmtpEndpoint("mail.example.com", 465, implicit_tls=True), credentials
        )

        await transport.send(_message())

        assert ssl_cls.call_args.args == ("mail.example.com", 465)
        assert server.user == "user"
        assert server.password == "pass"
        server.auth.assert_called_once_with("PLAIN", server.auth_plain)
        server.send_message.assert_called_once()
        assert transport.authenticated

    async def test_starttls_upgrade(self, mocker):
        smtp_cls = mocker.patch("infrastructure.email.smtp.smtplib.SMTP")
        server = smtp_cls.return_value.__enter__.return_value

        await SmtpTransport(SmtpEndpoint("mail.internal", 587, starttls=True)).send(
            _message()
        )

        server.starttls.assert_called_once()

    async def test_send_failure_propagates(self, mocker):
        smtp_cls = mocker.patch("infrastructure.email.smtp.smtplib.SMTP")
        server = smtp_cls.return_value.__enter__.return_value
        server.send_message.side_effect = smtplib.SMTPDataError(554, b"rejected")

        with pytest.raises(smtplib.SMTPDataError):
            await SmtpTransport(SmtpEndpoint("localhost", 2525)).send(_message())

    async def test_connection_refused_propagates(self, mocker):
        mocker.patch(
            "infrastructure.email.smtp.smtplib.SMTP",
            side_effect=ConnectionRefusedError("refused"),
        )
        with pytest.raises(OSError):
            await SmtpTransport(SmtpEndpoint("localhost", 2525)).send(_message())
