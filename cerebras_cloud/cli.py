#!/usr/bin/env python3
"""
Command-line interface for the Cerebras Cloud API.
"""

import argparse
import os
import sys
import logging
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import after loading env vars to ensure proper configuration
from . import __version__
from .client import CerebrasClient, create_client
from .domain.errors import CerebrasApiError, CerebrasError
from .domain.models.chat import ChatCompletionRequest, ChatMessage
from .infrastructure.config.settings import API_KEY_ENV
from .utils import mask_secret, setup_logging, validate_api_key


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cerebras-cli',
        description="Cerebras Cloud API client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --list-models                                  # Available models
  %(prog)s --model-info llama3.1-8b                       # One model's details
  %(prog)s --message "What is the capital of France?"     # Single message
  %(prog)s --message "Write a haiku" --stream             # Streaming mode
        """
    )

    parser.add_argument('--api-key',
                       default=os.getenv(API_KEY_ENV),
                       help=f'Cerebras API key (or set {API_KEY_ENV} env var)')
    parser.add_argument('--model',
                       default=os.getenv('CEREBRAS_DEFAULT_MODEL'),
                       help='Model name (default: settings default_model)')
    parser.add_argument('--message',
                       help='Message to send as a chat completion')
    parser.add_argument('--system',
                       help='Optional system prompt sent before the message')
    parser.add_argument('--stream',
                       action='store_true',
                       help='Stream the response as it is generated')
    parser.add_argument('--max-tokens',
                       type=int,
                       help='Max tokens to generate (default: settings default_max_tokens)')
    parser.add_argument('--temperature',
                       type=float,
                       help='Sampling temperature 0-2 (default: settings default_temperature)')
    parser.add_argument('--list-models',
                       action='store_true',
                       help='List available models and exit')
    parser.add_argument('--model-info',
                       metavar='MODEL_ID',
                       help='Show details for one model and exit')
    parser.add_argument('--log-level',
                       default=os.getenv('CEREBRAS_LOG_LEVEL', 'WARNING'),
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                       help='Set logging level')
    parser.add_argument('--version',
                       action='version',
                       version=f'%(prog)s {__version__}')
    return parser


def build_chat_request(args: argparse.Namespace, client: CerebrasClient) -> ChatCompletionRequest:
    settings = client.settings
    messages = []
    if args.system:
        messages.append(ChatMessage.system(args.system))
    messages.append(ChatMessage.user(args.message))
    return ChatCompletionRequest(
        model=args.model or settings.default_model,
        messages=messages,
        max_tokens=args.max_tokens if args.max_tokens is not None else settings.default_max_tokens,
        temperature=args.temperature if args.temperature is not None else settings.default_temperature,
    )


def print_models(client: CerebrasClient) -> None:
    models = client.list_models()
    print("Available models:")
    for model in models:
        context = f" (Context: {model.context_window} tokens)" if model.context_window else ""
        print(f"  - {model.id}: {model.name}{context}")


def print_model_info(client: CerebrasClient, model_id: str) -> None:
    model = client.get_model(model_id)
    print(f"ID: {model.id}")
    print(f"Name: {model.name}")
    if model.owned_by:
        print(f"Owned by: {model.owned_by}")
    if model.context_window:
        print(f"Context window: {model.context_window} tokens")
    if model.description:
        print(f"Description: {model.description}")
    print(f"Available: {'yes' if model.is_available else 'no'}")


def run_message(client: CerebrasClient, args: argparse.Namespace) -> None:
    request = build_chat_request(args, client)
    if args.stream:
        stream = client.create_chat_completion_stream(request)
        try:
            for chunk in stream:
                for choice in chunk.choices[:1]:
                    if choice.delta.content:
                        print(choice.delta.content, end='', flush=True)
        finally:
            stream.close()
        print()
        return

    response = client.create_chat_completion(request)
    print(response.content or "")
    if response.usage:
        print(f"Tokens used: {response.usage.total_tokens}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for cerebras-cli."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if not (args.list_models or args.model_info or args.message):
        parser.print_help()
        sys.exit(1)

    # Validate API key
    if not args.api_key:
        print(f"Error: API key is required. Set {API_KEY_ENV} environment variable or use --api-key", file=sys.stderr)
        sys.exit(1)

    if not validate_api_key(args.api_key):
        print("Error: Invalid API key format", file=sys.stderr)
        sys.exit(1)

    try:
        with create_client(api_key=args.api_key, log_level=args.log_level) as client:
            logger.debug(f"Using API key {mask_secret(args.api_key)} against {client.settings.base_url}")
            if args.list_models:
                print_models(client)
            elif args.model_info:
                print_model_info(client, args.model_info)
            else:
                run_message(client, args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except CerebrasApiError as e:
        logger.error(f"API error: {e}")
        print(f"Error: {e.message}", file=sys.stderr)
        if e.status_code is not None:
            print(f"Status Code: {e.status_code}", file=sys.stderr)
        sys.exit(1)
    except CerebrasError as e:
        logger.error(f"Client error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
