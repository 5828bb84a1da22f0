import sys
from pathlib import Path

# Add project root to sys.path
# This ensures that 'belaykit' is importable as a top-level module during tests
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
