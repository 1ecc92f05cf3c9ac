import os

SHELL_NAME = "jobsh"

# loguru level for the stderr sink installed by main()
LOG_LEVEL = os.getenv("JOBSH_LOG_LEVEL", "WARNING").upper()

# Chunk size used by cp / mv
COPY_BUFFER_SIZE = int(os.getenv("JOBSH_COPY_BUFFER", "1024"))

PROMPT_OK = "$> "
PROMPT_FAIL = "$< "
