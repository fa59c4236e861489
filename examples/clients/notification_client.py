"""
Example client that listens for notification broadcasts.

Requirements:
    pip install websockets

Usage:
    python examples/clients/notification_client.py --room ops
    # in another shell
    curl -X POST localhost:5000/notification \
        -H 'content-type: application/json' \
        -d '{"message": "hello", "userId": "42"}'
"""

import argparse
import asyncio
import json

import websockets


async def listen(url: str, room: str | None) -> None:
    """
    Connect to the relay and print every frame it sends.

    Args:
        url: WebSocket URL of the relay.
        room: Optional room to join after connecting.
    """
    async with websockets.connect(url) as websocket:
        greeting = json.loads(await websocket.recv())
        print(f"✓ Connected as {greeting['data']['id']}")

        if room:
            await websocket.send(json.dumps({"event": "join_room", "data": room}))

        async for raw in websocket:
            frame = json.loads(raw)
            print(f"← {frame['event']}: {json.dumps(frame['data'], indent=2)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default="ws://localhost:5000/ws")
    parser.add_argument("--room", default=None)
    args = parser.parse_args()

    try:
        asyncio.run(listen(args.url, args.room))
    except KeyboardInterrupt:
        pass
