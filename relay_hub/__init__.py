"""
Farm security relay hub.

This service is responsible for:
- Tracking WebSocket connections from the ESP32 sensor node, the ESP32-CAM and
  any number of Android control apps.
- Routing commands from Android clients to the devices, queueing them for HTTP
  polling when a device is offline.
- Broadcasting alerts, state and camera images to every Android client.

The HTTP/WebSocket server is implemented with Tornado.
"""
