"""
=======
Logging
=======

"""

from bootloader.logging.utilities import (
    configure_logging_to_file,
    configure_logging_to_terminal,
    format_record,
    get_logger,
    verbosity_level,
)
