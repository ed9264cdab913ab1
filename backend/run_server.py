#!/usr/bin/env python3
"""
Launch script for the Swing Analysis Engine backend.

Usage:
    python run_server.py [data_folder] [--port PORT] [--host HOST]

Examples:
    python run_server.py                    # Use default ./data/sessions folder
    python run_server.py /path/to/sessions  # Use custom folder
    python run_server.py --port 5000        # Run on port 5000
"""

import argparse
import os
import sys
from pathlib import Path

# Add swing_engine to path
sys.path.insert(0, str(Path(__file__).parent))


def main():
    parser = argparse.ArgumentParser(description="Swing Analysis Engine Server")
    parser.add_argument(
        "data_folder",
        nargs="?",
        default="./data/sessions",
        help="Folder where analyzed swing sessions are stored (default: ./data/sessions)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to run server on (default: 8000)"
    )
    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for all interfaces)"
    )
    parser.add_argument(
        "--equipment", "-e",
        default=None,
        help="JSON file with extra equipment profiles"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Run in debug mode"
    )

    args = parser.parse_args()

    data_folder = Path(args.data_folder)

    print("Swing Analysis Engine")
    print("=" * 40)
    print(f"Session folder: {data_folder.absolute()}")
    print(f"Server: http://{args.host}:{args.port}")
    print("=" * 40)

    # Read by the FastAPI lifespan / equipment table at import time
    os.environ["SWING_DATA_FOLDER"] = str(data_folder)
    if args.equipment:
        os.environ["SWING_EQUIPMENT_FILE"] = args.equipment

    print("\nAPI Endpoints:")
    print("  GET  /                   - Health check")
    print("  GET  /health             - Detailed health")
    print("  GET  /equipment          - List equipment profiles")
    print("  POST /recording/start    - Start a recording session")
    print("  POST /recording/samples  - Push motion samples")
    print("  GET  /recording/status   - Recorder status and phase")
    print("  POST /recording/analyze  - Analyze the completed recording")
    print("  POST /swings/analyze     - Analyze a full sample list")
    print("  GET  /swings             - List stored swings")
    print("  GET  /swings/stats       - Swing statistics")
    print("\nStarting server...")

    import uvicorn

    uvicorn.run(
        "swing_engine.main:app",
        host=args.host,
        port=args.port,
        reload=args.debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
