"""Runtime safety layer — permission decisions and sandboxed execution."""
