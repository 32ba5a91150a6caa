"""Example user service: one catalog shared by a FastAPI server and an httpx client."""
