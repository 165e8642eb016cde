import random as _random

# Secrets must come from the operating system CSPRNG.
random = _random.SystemRandom()
