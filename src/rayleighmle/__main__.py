from rayleighmle.datasets import load_fiber_strength
from rayleighmle.report import fit_report


def main() -> None:
    print(fit_report(load_fiber_strength()))


if __name__ == "__main__":
    main()
