"""
Quick start script for running the backend server.
Handles basic environment checks before starting.
"""

import argparse
import os
import signal
import sys
import time
from pathlib import Path


# Global flag for graceful shutdown
shutdown_requested = False


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    global shutdown_requested
    if not shutdown_requested:
        shutdown_requested = True
        print("\n\n" + "=" * 60)
        print("  Shutdown signal received. Stopping server...")
        print("=" * 60)
        sys.exit(0)


def check_env_file():
    """Load .env if present and report which scoring backend will be used."""
    env_path = Path(__file__).parent / ".env"

    if env_path.exists():
        from dotenv import load_dotenv
        load_dotenv(env_path)
    else:
        print("NOTE: .env file not found, using process environment only")

    gemini_key = os.getenv("GEMINI_API_KEY")
    if not gemini_key or gemini_key == "your_gemini_api_key_here":
        print("NOTE: GEMINI_API_KEY not set, answers will be scored by the local heuristic")
        print("  - Get API key: https://aistudio.google.com/app/apikey")
    else:
        print("✓ Gemini scoring enabled")

    store_dir = os.getenv("SESSION_STORE_DIR")
    if store_dir:
        print(f"✓ Session snapshots stored in {store_dir}")
    else:
        print("NOTE: SESSION_STORE_DIR not set, sessions are kept in memory only")


def check_dependencies():
    """Check if required packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "langchain_core",
        "langchain_google_genai",
        "tenacity",
        "prometheus_client",
        "PyPDF2",
        "docx"
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print(f"ERROR: Missing required packages: {', '.join(missing)}")
        print("\nPlease install dependencies:")
        print("  pip install -e .")
        return False

    print("✓ All dependencies are installed")
    return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Interview Coach - Backend Server")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"), help="Bind address")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")), help="Bind port")
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("UVICORN_RELOAD", "false").lower() == "true",
        help="Enable auto-reload (also UVICORN_RELOAD=true)"
    )
    args = parser.parse_args()

    print("=" * 60)
    print("  Interview Coach - Backend Server")
    print("=" * 60)
    print()

    if not check_dependencies():
        sys.exit(1)

    check_env_file()

    # Register signal handlers for graceful shutdown
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print()
    print("API will be available at:")
    print(f"  - http://localhost:{args.port}")
    print(f"  - API docs: http://localhost:{args.port}/docs")
    print(f"  - Metrics: http://localhost:{args.port}/metrics")
    print()
    if args.reload:
        print("NOTE: Auto-reload is ENABLED")
    print("Press CTRL+C to stop the server")
    print("=" * 60)
    print()

    import uvicorn
    uvicorn.run(
        "interview_coach.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
        timeout_graceful_shutdown=5
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n" + "=" * 60)
        print("  Server stopped by user (CTRL+C)")
        print("=" * 60)
        # Give a moment for cleanup
        time.sleep(0.5)
        sys.exit(0)
    except SystemExit:
        # Allow clean exits from signal handler
        pass
    except Exception as e:
        print("\n\n" + "=" * 60)
        print(f"  ERROR: {str(e)}")
        print("=" * 60)
        sys.exit(1)
