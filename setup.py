"""
Setup file.
"""

from setuptools import setup

URL = "https://github.com/fatpack/fatpack"
KEYWORDS = "ios xcframework universal binary lipo cbindgen cargo xcodebuild packaging"



if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
