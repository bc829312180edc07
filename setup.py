from setuptools import setup

setup(
    name="arweave-tx",
    version="0.1.0",
    description="Arweave transaction model: typed primitives, RSA-PSS signing and verification",
    python_requires=">=3.11",
    # Top-level modules of the project
    py_modules=[
        "main",
        "node_client",
        "tx_builder",
        "tx_errors",
        "tx_model",
        "tx_primitives",
        "tx_sponge",
        "wallet_keys",
    ],
    install_requires=[
        "cryptography>=42.0.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            # command = module:function
            "arweave-tx=main:main",
        ],
    },
)
