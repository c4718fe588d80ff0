import os
import uvicorn


def main() -> None:
    dev = os.environ.get("ENV", "dev") == "dev"
    port = int(os.environ.get("PORT", 8080))

    if dev:
        # Local dev with reload
        uvicorn.run("coderunner.main:app", host="127.0.0.1", port=port, reload=True)
    else:
        uvicorn.run("coderunner.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
