"""
CredenSuite command line

    credensuite serve [--host HOST] [--port PORT] [--reload]
    credensuite init-db
"""

import argparse
import asyncio
import sys

from credensuite.core.config import settings


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credensuite",
        description="Member registry and ID card service",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=settings.SERVER_HOST)
    serve.add_argument("--port", type=int, default=settings.SERVER_PORT)
    serve.add_argument("--reload", action="store_true", default=False)

    subparsers.add_parser("init-db", help="Create tables and seed default settings")
    return parser


async def _init_db():
    from credensuite.core.database import init_db, close_db
    from credensuite.main import seed_defaults

    await init_db()
    await seed_defaults()
    await close_db()


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        import uvicorn
        uvicorn.run("credensuite.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "init-db":
        asyncio.run(_init_db())
        print(f"Database ready at {settings.DATABASE_URL}")
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
