# app/healthcheck.py
import sys, json
from launcharr.config import get_config
from launcharr.core.sonarr import SonarrClient

def main():
    # One ping against Sonarr; no commands are sent
    settings = get_config()
    ok, message = SonarrClient(settings).check_connectivity()
    print(json.dumps({"ok": ok, "server": settings.sonarr.server_url, "message": message}))
    sys.exit(0 if ok else 1)

if __name__ == "__main__":
    main()
