"""
libotp setup script
"""
#=============================================================================
# init script env -- ensure cwd = root of source dir
#=============================================================================
import os
root_dir = os.path.abspath(os.path.join(__file__, ".."))
os.chdir(root_dir)

#=============================================================================
# imports
#=============================================================================
from setuptools import setup, find_packages
import sys

#=============================================================================
# init setup options
#=============================================================================
opts = {"cmdclass": {}}
args = sys.argv[1:]

#=============================================================================
# version string
#=============================================================================

# pull version string from libotp (the package root has no third-party imports)
from libotp import __version__ as version

#=============================================================================
# static text
#=============================================================================
SUMMARY = "HOTP / TOTP one-time passwords and otpauth:// key uris"

DESCRIPTION = """\
libotp generates and validates one-time passwords per RFC 4226 (HOTP)
and RFC 6238 (TOTP), and parses & renders the ``otpauth://`` key uris
used to provision authenticator applications such as Google Authenticator.

* HMAC-SHA1, HMAC-SHA256 and HMAC-SHA512, 6 or 8 digit codes.
* Validation with a configurable window of accepted time steps.
* Generation of new keys with random secrets.
"""

KEYWORDS = """\
otp hotp totp 2fa mfa
rfc4226 rfc6238
google-authenticator otpauth
"""

CLASSIFIERS = """\
Intended Audience :: Developers
License :: OSI Approved :: BSD License
Natural Language :: English
Operating System :: OS Independent
Programming Language :: Python :: 3
Programming Language :: Python :: Implementation :: CPython
Programming Language :: Python :: Implementation :: PyPy
Topic :: Security :: Cryptography
Topic :: Software Development :: Libraries
""".splitlines()

if '.dev' in version:
    CLASSIFIERS.append("Development Status :: 3 - Alpha")
elif '.post' in version:
    CLASSIFIERS.append("Development Status :: 4 - Beta")
else:
    CLASSIFIERS.append("Development Status :: 5 - Production/Stable")

#=============================================================================
# run setup
#=============================================================================
setup(
    # package info
    packages=find_packages(root_dir, include=["libotp", "libotp.*"]),
    zip_safe=True,

    # metadata
    name="libotp",
    version=version,
    license="BSD",

    description=SUMMARY,
    long_description=DESCRIPTION,
    keywords=KEYWORDS,
    classifiers=CLASSIFIERS,

    python_requires=">=3.9",
    install_requires=[
        "typing_extensions>=4.6",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-archon",
        ],
    },

    # extra opts
    script_args=args,
    **opts
)

#=============================================================================
# eof
#=============================================================================
