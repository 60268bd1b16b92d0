"""HTTP trigger surface for coderag."""
