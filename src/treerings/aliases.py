from treerings.core.models import HashAlgorithmName

ALGORITHM_ALIASES = {
    "sha1": HashAlgorithmName.SHA1,
    "xxh128": HashAlgorithmName.XXH128,
    "xxhash": HashAlgorithmName.XXH128,
}

ALGORITHM_CHOICES = list(ALGORITHM_ALIASES.keys())

ALGORITHM_HELP_TEXT = (
    "Fingerprint digest:\n"
    "  sha1          : 160-bit SHA-1 over the sampled bytes (default)\n"
    "  xxh128/xxhash : 128-bit xxHash, faster, non-cryptographic\n"
)

EPILOG_TEXT = """
Fingerprints sample the first 16KB, the middle ~1MB and the last 16KB of each file.
Files up to 1MB are compared by their whole content; larger files that differ only
outside the sampled regions are reported as identical.

Examples:
  Scan one directory and write treerings.json
  %(prog)s ~/Pictures

  Find files on a laptop that are not in the backup yet
  %(prog)s /mnt/backup ~/Pictures

  Same as above, and copy them into the backup (existing files are never overwritten)
  %(prog)s /mnt/backup ~/Pictures --backup

  Preview where the files would be copied
  %(prog)s /mnt/backup ~/Pictures --backup --dry-run

  Reuse fingerprints from the last run for unchanged files, scan both roots in parallel
  %(prog)s /mnt/backup ~/Pictures --cache treerings.json --workers 2
"""
