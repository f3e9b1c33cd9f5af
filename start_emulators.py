#!/usr/bin/env python3
"""
Start the Firebase emulators declared in firebase.json.
Used for local development and the integration tests.
"""
import json
import os
import socket
import subprocess
import sys

REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
FIREBASE_JSON = os.path.join(REPO_ROOT, "firebase.json")

DISPLAY_NAMES = {
    "auth": "Auth",
    "firestore": "Firestore",
    "database": "Realtime Database",
    "ui": "Emulator UI",
    "hub": "Emulator Hub",
}


def check_port(host, port):
    """Check if a port is already in use."""
    try:
        with socket.create_connection((host, port), timeout=1):
            return True
    except OSError:
        return False


def emulator_ports(config_path=FIREBASE_JSON):
    """Map emulator display name -> port from firebase.json."""
    with open(config_path, "r") as f:
        emulators = json.load(f).get("emulators", {})
    return {
        DISPLAY_NAMES.get(name, name): settings["port"]
        for name, settings in emulators.items()
        if isinstance(settings, dict) and "port" in settings
    }


def check_firebase_cli():
    """Check if Firebase CLI is installed."""
    try:
        result = subprocess.run(["firebase", "--version"], capture_output=True, text=True, timeout=5)
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return False
    if result.returncode != 0:
        return False
    print(f"Firebase CLI installed: {result.stdout.strip()}")
    return True


def start_emulators():
    """Start Firebase emulators."""
    ports = emulator_ports()
    busy = [f"{name} (port {port})" for name, port in ports.items() if check_port("localhost", port)]
    if busy:
        print("Warning: some emulator ports are already in use:")
        for emulator in busy:
            print(f"  - {emulator}")
        if input("Continue anyway? (y/N): ").strip().lower() != "y":
            print("Aborted.")
            return False

    for name, port in ports.items():
        print(f"  {name}: http://localhost:{port}")
    print("Press Ctrl+C to stop the emulators")

    try:
        subprocess.run(["firebase", "emulators:start"], cwd=REPO_ROOT)
    except KeyboardInterrupt:
        print("Emulators stopped.")
    return True


def main():
    if not check_firebase_cli():
        print("Firebase CLI not found. Install it with: npm install -g firebase-tools")
        sys.exit(1)
    sys.exit(0 if start_emulators() else 1)


if __name__ == "__main__":
    main()
