import sys

from brickstack.runner.experiment import cli

sys.exit(cli())
