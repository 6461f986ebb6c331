"""Interactive CLI simulator — walk the forgot-password flow without a browser."""

import asyncio

from thlight_panel.services.panel_client import PanelClient

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"


def _say(ok: bool, message: str) -> None:
    colour = GREEN if ok else RED
    print(f"{colour}{BOLD}Panel:{RESET} {message}\n")


async def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print(f"  🔐  THLIGHT Panel — Password Reset Simulator")
    print(f"{'=' * 52}{RESET}\n")

    print(f"{DIM}Tip: use a plausible address such as player.one@gmail.com{RESET}")
    print(f"{DIM}     Type 'inbox' to peek at the email previews, 'autofill' to")
    print(f"     fetch the latest OTP, 'resend' for a new code, 'quit' to exit{RESET}\n")

    # ── Start the API in the background ──────────────────
    import uvicorn
    from thlight_panel.main import app

    config = uvicorn.Config(app, host="127.0.0.1", port=8000, log_level="warning")
    server = uvicorn.Server(config)
    server_task = asyncio.create_task(server.serve())

    # Give the server a moment to start
    await asyncio.sleep(0.5)

    client = PanelClient("http://127.0.0.1:8000/api")

    try:
        email = ""
        while not email:
            candidate = input(f"{YELLOW}Email address: {RESET}").strip()
            result = await client.validate_email(candidate)
            _say(result.ok, result.message)
            if result.ok:
                email = candidate

        sent = await client.send_otp(email, purpose="reset")
        _say(sent.ok, sent.message)

        while True:
            try:
                user_input = input(f"{BLUE}{BOLD}OTP:{RESET} ").strip()
            except (KeyboardInterrupt, EOFError):
                print(f"\n{DIM}Goodbye!{RESET}")
                break

            if not user_input:
                continue

            command = user_input.lower()
            if command == "quit":
                print(f"{DIM}Goodbye!{RESET}")
                break

            if command == "inbox":
                emails = await client.check_inbox(email)
                if not emails:
                    print(f"{DIM}No emails found for this address.{RESET}\n")
                for item in emails:
                    print(f"{DIM}[{item.time_ago}]{RESET} {item.subject}  otp={item.otp or '-'}")
                print()
                continue

            if command == "autofill":
                latest = await client.latest_otp(email)
                if latest and latest.otp:
                    print(f"{DIM}Latest OTP ({latest.time_ago}): {latest.otp}{RESET}\n")
                elif latest and latest.expired:
                    _say(False, "Latest OTP has expired. Please request a new one.")
                else:
                    _say(False, "No valid OTP found for this email.")
                continue

            if command == "resend":
                sent = await client.send_otp(email, purpose="reset")
                _say(sent.ok, sent.message)
                continue

            verified = await client.verify_otp(email, user_input)
            _say(verified.ok, verified.message)
            if verified.ok:
                break
    finally:
        # Shut down the background server
        server.should_exit = True
        await server_task


if __name__ == "__main__":
    asyncio.run(main())
