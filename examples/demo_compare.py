from drbgbench.drbg import MECHANISMS, new_seed

if __name__ == "__main__":
    seed = new_seed(48)
    for cls in MECHANISMS:
        drbg = cls(seed)
        out = drbg.generate(256)
        print(f"{drbg.name():<10} state={drbg.state_size():>3}B  {out.hex()}")
