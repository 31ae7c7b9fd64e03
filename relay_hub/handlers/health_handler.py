import tornado.web

from relay_hub.services.relay import RelayHub


class HealthHandler(tornado.web.RequestHandler):
    def initialize(self, hub: RelayHub):
        self.hub = hub

    def get(self):
        self.write(self.hub.status())


class IndexHandler(tornado.web.RequestHandler):
    def get(self):
        self.set_header("Content-Type", "text/plain; charset=UTF-8")
        self.write("Farm Security relay hub")
