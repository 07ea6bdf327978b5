#!/usr/bin/env python3
"""
Voice Shopper - Entry Point

Routes to the text or voice interface and prints the list at exit.
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

from voice_shopper.core.io import KeyboardInput, TextInput
from voice_shopper.core.orchestrator import Notification, VoiceListOrchestrator
from voice_shopper.modules.shopping.shopping_list import ShoppingList
from voice_shopper.utils.config import get_config_manager
from voice_shopper.utils.logger import get_logger, setup_logging

FINISH_WORDS = {"done", "quit", "exit"}


def print_banner():
    """Print startup banner"""
    banner = """
    ╔════════════════════════════════════════════════════╗
    ║                                                    ║
    ║          Voice Shopper                             ║
    ║          Say it, and it's on the list              ║
    ║                                                    ║
    ╚════════════════════════════════════════════════════╝
    """
    print(banner)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Voice-driven shopping list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Interface Selection:
  --interface text      Type utterances, one per line [DEFAULT]
  --interface voice     Speak into the microphone (Ctrl+C to stop)

Examples:
  voice-shopper
  voice-shopper --interface voice
  voice-shopper --config ./config --catalog ./my_catalog.yaml
        """
    )

    parser.add_argument(
        "--interface",
        choices=["text", "voice"],
        default="text",
        help="Interface to use (text, voice)"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Config directory containing settings.yaml"
    )

    parser.add_argument(
        "--catalog",
        default=None,
        help="Grocery catalog YAML (defaults to the bundled catalog)"
    )

    return parser.parse_args(argv)


def print_notification(notification: Notification):
    marker = "[!]" if notification.variant == "destructive" else "[OK]"
    line = f"{marker} {notification.title}"
    if notification.description:
        line += f": {notification.description}"
    print(line)
    sys.stdout.flush()


def print_list(shopping_list: ShoppingList):
    """Print the final list"""
    print("\nShopping list:")
    if not len(shopping_list):
        print("  (empty)")
        return
    for item in shopping_list:
        mark = "x" if item.completed else " "
        print(f"  [{mark}] {item.describe()}")


async def run_text_interface(orchestrator: VoiceListOrchestrator, source: TextInput) -> int:
    """Read typed utterances until 'done' or EOF"""
    print("Type what you need (e.g. \"2 apples, milk and a dozen eggs\"). 'done' to finish.\n")
    loop = asyncio.get_running_loop()

    while True:
        result = await loop.run_in_executor(None, source.read)
        if result.closed:
            break
        if result.is_empty():
            continue
        if result.text.lower() in FINISH_WORDS:
            break
        orchestrator.submit_text(result.text)

    return 0


async def run_voice_interface(orchestrator: VoiceListOrchestrator) -> int:
    """Listen until a stop phrase, a timeout or Ctrl+C"""
    logger = get_logger('main')

    if not orchestrator.is_supported:
        print("[FAIL] No microphone available. Try --interface text")
        return 1

    print("[CALIBRATE] Stay quiet for a moment...")
    await asyncio.get_running_loop().run_in_executor(None, orchestrator.session.engine.calibrate)

    print("[LISTEN] Say your items. Say \"that's it\" when finished.\n")
    if not orchestrator.start_listening():
        return 1

    try:
        await orchestrator.session.wait_idle()
    except asyncio.CancelledError:
        logger.info("Interrupted by user")
        orchestrator.stop_listening()
        raise

    return 0


async def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    load_dotenv()

    config = get_config_manager(args.config)
    setup_logging(
        log_dir=config.get('logging.dir', 'logs'),
        level=config.get('logging.level', 'INFO')
    )
    logger = get_logger('main')

    print_banner()

    try:
        orchestrator = VoiceListOrchestrator.from_config(
            config,
            catalog_path=args.catalog,
            notify=print_notification
        )
    except Exception as e:
        logger.critical(f"Startup failed: {e}", exc_info=True)
        print(f"[FAIL] Startup failed: {e}")
        return 1

    try:
        if args.interface == "voice":
            exit_code = await run_voice_interface(orchestrator)
        else:
            exit_code = await run_text_interface(orchestrator, KeyboardInput())
    finally:
        await orchestrator.close()
        print_list(orchestrator.shopping_list)

    return exit_code


def run():
    """Console script entry"""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        print("\nGoodbye!")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
