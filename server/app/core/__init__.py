SERVICE_NAME = "server"
