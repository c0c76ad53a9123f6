__version__ = "0.1.0"
__title__ = "ecash"
__author__ = "Ecash contributors"
__email__ = "ecash@example.org"
__url__ = "https://example.org/ecash"
__license__ = "BSD-3-Clause"
__description__ = "Blind-signature e-cash with double-spending detection."
__copyright__ = "2026, Ecash contributors"

from ecash.config import *
from ecash.rand import *
from ecash.blind_signature import *
from ecash.identity import *
from ecash.commitment import *
from ecash.coin import *
from ecash.merchant import *
from ecash.detection import *
from ecash.bank import *
from ecash.pack import *
