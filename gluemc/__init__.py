"""gluemc: relays a Minecraft server's log output to Discord webhooks."""
