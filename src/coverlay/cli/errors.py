# mirror <sysexits.h>
EXIT_OK = 0  # Normal success
EXIT_USAGE = 64  # URI could not be resolved to a coverage location
EXIT_DATAERR = 65  # Coverage service replied with an unexpected report
EXIT_UNAVAILABLE = 69  # Coverage service could not be reached
