import os
import uvicorn

from roomsplit.config import LOG_LEVEL


def main():
    # Hosting platforms set PORT; default to 8080 locally
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
