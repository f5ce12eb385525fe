import unittest

from services.relay.app.pairing.hub import ConnectionHub
from services.relay.app.pairing.messages import Outbound


class ConnectionHubTests(unittest.IsolatedAsyncioTestCase):
    async def test_emit_queues_event_for_registered_connection(self) -> None:
        hub = ConnectionHub()
        queue = await hub.register("conn-a")

        delivered = await hub.emit("conn-a", "session-created", "4821")

        self.assertTrue(delivered)
        message = queue.get_nowait()
        self.assertEqual(message["event"], "session-created")
        self.assertEqual(message["payload"], "4821")
        self.assertIn("ts", message)

    async def test_emit_to_departed_connection_is_dropped(self) -> None:
        hub = ConnectionHub()
        await hub.register("conn-a")
        await hub.unregister("conn-a")

        self.assertFalse(await hub.emit("conn-a", "peer-disconnected"))
        self.assertFalse(await hub.emit("never-seen", "peer-disconnected"))
        self.assertFalse(hub.is_connected("conn-a"))

    async def test_full_queue_drops_oldest(self) -> None:
        hub = ConnectionHub(queue_size=2)
        queue = await hub.register("conn-a")

        for idx in range(3):
            await hub.emit("conn-a", "ice-candidate", {"candidate": idx})

        payloads = [queue.get_nowait()["payload"]["candidate"] for _ in range(queue.qsize())]
        self.assertEqual(payloads, [1, 2])

    async def test_deliver_routes_each_message(self) -> None:
        hub = ConnectionHub()
        host = await hub.register("host")
        guest = await hub.register("guest")

        await hub.deliver(
            [
                Outbound("guest", "session-joined", {"role": "guest", "peerId": "host"}),
                Outbound("host", "peer-joined", {"role": "host", "peerId": "guest"}),
                Outbound("gone", "error", "Invalid Token"),
            ]
        )

        self.assertEqual(guest.get_nowait()["event"], "session-joined")
        self.assertEqual(host.get_nowait()["payload"], {"role": "host", "peerId": "guest"})
        self.assertEqual(len(hub), 2)


if __name__ == "__main__":
    unittest.main()
