from mailhog_server.main import run

run()
