"""
FastAPI launcher script.

Run with: python run_api.py
"""

import sys
from pathlib import Path

# Ensure the project root is in sys.path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    import uvicorn
    from cipher_dex.core.config_loader import load_config

    api_config = load_config().get('api', {})
    uvicorn.run(
        "cipher_dex.api.main:app",
        host=api_config.get('host', '0.0.0.0'),
        port=api_config.get('port', 5000),
        reload=True
    )
