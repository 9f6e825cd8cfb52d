import uvicorn
import os

if __name__ == "__main__":
    port = int(os.environ.get("STREAMHUB_PORT", "8000"))

    print("Starting StreamHub SSE relay...")
    print(f"Docs available at: http://localhost:{port}/docs")

    uvicorn.run(
        "streamhub.api.server:app",
        host="0.0.0.0",
        port=port,
        reload=True
    )
